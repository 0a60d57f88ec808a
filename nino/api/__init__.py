"""HTTP API over a ProjectStore."""

from nino.api.app import create_app

__all__ = ["create_app"]
