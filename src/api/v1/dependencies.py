"""Dependency injection factories for API v1.

Backend clients and the settings they were built from are stored on
``app.state`` by the application factory; these factories only hand them
to route handlers.
"""

from fastapi import Request

from core.config import Settings
from domain.services.auth_service import AuthService
from domain.services.profile_service import ProfileService


def get_app_settings(request: Request) -> Settings:
    """Get the settings the running app was created with."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_profile_service(request: Request) -> ProfileService:
    """Get Profile service instance."""
    return request.app.state.profile_service  # type: ignore[no-any-return]


def get_auth_service(request: Request) -> AuthService:
    """Get Auth service instance."""
    return request.app.state.auth_service  # type: ignore[no-any-return]
