"""Request-scoped access to the objects the application was created with."""

from fastapi import Request

from nino.config import NinoSettings
from nino.state import ProjectStore


def get_store(request: Request) -> ProjectStore:
    return request.app.state.store


def get_settings(request: Request) -> NinoSettings:
    return request.app.state.settings
