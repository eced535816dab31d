"""Dependency injection helpers for FastAPI."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header

from .config import Settings
from .services import auth_service, suggestion_service, task_service
from .services.auth_service import AuthService
from .services.suggestion_service import SuggestionService
from .services.task_service import TaskService


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return Settings()


def get_auth_service() -> AuthService:
    """Get the auth service created at startup."""
    service = auth_service.get_auth_service()
    if service is None:
        raise RuntimeError("Auth service not initialized")
    return service


def get_task_service() -> TaskService:
    """Get the task service created at startup."""
    service = task_service.get_task_service()
    if service is None:
        raise RuntimeError("Task service not initialized")
    return service


def get_suggestion_service() -> SuggestionService:
    """Get the suggestion service created at startup."""
    service = suggestion_service.get_suggestion_service()
    if service is None:
        raise RuntimeError("Suggestion service not initialized")
    return service


def get_current_user_id(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    x_auth_token: Annotated[Optional[str], Header(alias="x-auth-token")] = None,
) -> str:
    """Resolve the ``x-auth-token`` header to the caller's user id.

    Raises:
        UnauthorizedError: If the token is missing or invalid
    """
    return auth.verify_token(x_auth_token)


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
