# pixelbridge_project/core/dependencies.py
from fastapi import Request

from config.settings import Settings
from ..services.conversions_api_service import ConversionsApiClient


def get_app_settings(request: Request) -> Settings:
    """The settings the app was built with. Loaded once at startup, never mutated."""
    return request.app.state.settings


def get_conversions_client(request: Request) -> ConversionsApiClient:
    return request.app.state.conversions_client
