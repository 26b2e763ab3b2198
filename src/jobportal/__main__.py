from jobportal.cli import main

main()
