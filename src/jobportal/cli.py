"""Command-line interface for the job portal matching core."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from jobportal.applications.status import (
    STATUS_LABELS,
    STATUS_SORT_ORDER,
    VALID_STATUS_TRANSITIONS,
    is_terminal,
    next_advance_status,
)
from jobportal.config import settings
from jobportal.core.models import CandidateSkill, JobSkillRequirement
from jobportal.matching.catalog import SkillCatalog
from jobportal.matching.explanation import explain_match, result_label, score_color
from jobportal.matching.scoring import MatchEngine
from jobportal.utils.logging import configure_logging

app = typer.Typer(
    name="jobportal",
    help="Job portal match scoring and application status workflow",
    add_completion=False,
)
console = Console()

RICH_COLORS = {"success": "green", "warning": "yellow", "danger": "red"}


@app.callback()
def setup() -> None:
    """Job portal match scoring and application status workflow."""
    configure_logging()


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Host to bind to"),
    port: int = typer.Option(settings.port, help="Port to bind to"),
    reload: bool = typer.Option(settings.reload, help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print(f"Starting job portal API on {host}:{port} ({settings.data_backend} backend)")
    uvicorn.run(
        "jobportal.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Job Portal Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Show non-sensitive settings
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Data Backend", settings.data_backend)
    table.add_row("Supabase URL", settings.supabase_url or "not configured")
    table.add_row("Supabase Key", "configured" if settings.supabase_key else "not configured")
    table.add_row("Request Timeout", f"{settings.request_timeout}s")
    table.add_row("Scoring Batch Size", str(settings.scoring_batch_size))
    table.add_row("Recommendation Limit", str(settings.recommendation_limit))

    console.print(table)


@app.command()
def transitions() -> None:
    """Show the application status state machine."""
    table = Table(title="Application Status Transitions")
    table.add_column("Status", style="cyan")
    table.add_column("Label")
    table.add_column("Allowed next statuses", style="green")
    table.add_column("Advance to", style="magenta")

    for status in sorted(VALID_STATUS_TRANSITIONS, key=STATUS_SORT_ORDER.get):
        targets = VALID_STATUS_TRANSITIONS[status]
        advance = next_advance_status(status)
        table.add_row(
            status.value,
            STATUS_LABELS[status],
            ", ".join(t.value for t in targets) if targets else "[dim]terminal[/dim]",
            advance.value if advance else "-",
        )

    console.print(table)
    terminal = [s.value for s in VALID_STATUS_TRANSITIONS if is_terminal(s)]
    console.print(f"Terminal statuses: {', '.join(terminal)}")


@app.command()
def score(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON match input"),
) -> None:
    """
    Score a match described in a JSON file.

    The file holds ``candidate_skills`` ([{"name", "proficiency"}]) and
    ``job_skills`` ([{"name", "is_required"}]); location and remote keys
    (job_location, job_remote_ok, seeker_location, seeker_remote_ok) are optional.
    """
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {file}: {e}[/red]")
        raise typer.Exit(code=1)

    catalog = SkillCatalog.default()
    try:
        candidate_skills = [
            CandidateSkill(skill=catalog.resolve_or_create(item["name"]), proficiency=item.get("proficiency"))
            for item in data.get("candidate_skills", [])
        ]
        job_skills = [
            JobSkillRequirement(skill=catalog.resolve_or_create(item["name"]), is_required=bool(item.get("is_required")))
            for item in data.get("job_skills", [])
        ]
    except (KeyError, TypeError, AttributeError) as e:
        console.print(f"[red]Invalid skill entry in {file}: every skill needs a \"name\" ({e!r})[/red]")
        raise typer.Exit(code=1)

    result = MatchEngine().score(candidate_skills, job_skills)
    explanation = explain_match(
        result,
        job_location=data.get("job_location"),
        job_remote_ok=data.get("job_remote_ok"),
        seeker_location=data.get("seeker_location"),
        seeker_remote_ok=data.get("seeker_remote_ok"),
    )

    color = RICH_COLORS[score_color(result.skills_only_score)]
    console.print(
        f"Skills match: [{color}]{result.skills_only_score}%[/{color}] ({result_label(result)})"
    )
    console.print(
        f"Skill coverage: {result.skill_coverage_percentage}%  "
        f"Required coverage: {result.required_skills_coverage}%"
    )

    table = Table(title="Skills")
    table.add_column("Skill", style="cyan")
    table.add_column("Required")
    table.add_column("Proficiency")
    table.add_column("Match")
    for matched in result.matched_skills:
        table.add_row(matched.skill.name, str(matched.is_required), matched.candidate_proficiency or "-", "[green]exact[/green]")
    for partial in result.partially_matched_skills:
        table.add_row(partial.skill.name, str(partial.is_required), partial.candidate_proficiency or "-", "[yellow]partial[/yellow]")
    for missing in result.missing_skills:
        table.add_row(missing.skill.name, str(missing.is_required), "-", "[red]missing[/red]")
    console.print(table)

    factors = Table(title=f"Overall match: {explanation.blended_score}%")
    factors.add_column("Factor", style="cyan")
    factors.add_column("Score")
    factors.add_column("Status")
    factors.add_column("Explanation")
    for factor in explanation.factors:
        factors.add_row(factor.name, f"{factor.score}/{factor.max_score}", factor.status.value, factor.explanation)
    console.print(factors)
    console.print(explanation.summary)

    hints = catalog.transferable_hints(
        (m.skill.id for m in result.missing_skills),
        (c.skill_id for c in candidate_skills),
    )
    for recommendation in explanation.recommendations + hints:
        console.print(f"  - {recommendation}")


@app.command()
def version() -> None:
    """Show version information."""
    from jobportal import __version__
    console.print(f"Job Portal Core v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
