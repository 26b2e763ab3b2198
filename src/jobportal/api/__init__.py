"""API package for the job portal matching core."""

from .main import app, create_app

__all__ = ["app", "create_app"]
