"""
API Dependencies

Backend client, services, and the signed-in user for route handlers.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from fastapi import Depends, HTTPException, Request, status

from eduportal.backend import BackendClient
from eduportal.config import settings
from eduportal.core.roles import UserRole, home_path
from eduportal.core.schemas import UserSchema
from eduportal.services import (
    AttendanceService,
    AuthService,
    CascadeReport,
    GroupService,
    LessonService,
    NotActivated,
    SurveyService,
    UserService,
)
from eduportal.services.auth import NOT_ACTIVATED_MESSAGE

T = TypeVar("T")


def get_backend(request: Request) -> BackendClient:
    """Shared backend client created in the application lifespan."""
    backend: BackendClient = request.app.state.backend
    return backend


def get_users(backend: BackendClient = Depends(get_backend)) -> UserService:
    return UserService(backend)


def get_auth(backend: BackendClient = Depends(get_backend)) -> AuthService:
    return AuthService(backend)


def get_groups(backend: BackendClient = Depends(get_backend)) -> GroupService:
    return GroupService(backend)


def get_lessons(backend: BackendClient = Depends(get_backend)) -> LessonService:
    return LessonService(backend)


def get_attendance(backend: BackendClient = Depends(get_backend)) -> AttendanceService:
    return AttendanceService(backend)


def get_surveys(backend: BackendClient = Depends(get_backend)) -> SurveyService:
    return SurveyService(backend)


def get_backend_secret(request: Request) -> str | None:
    return request.cookies.get(settings.BACKEND_SESSION_COOKIE_NAME)


async def get_current_user(
    auth: AuthService = Depends(get_auth),
    secret: str | None = Depends(get_backend_secret),
) -> UserSchema:
    """Signed-in, active user behind the backend session cookie.

    The snapshot cookie is only a routing hint for the gate; identity and
    role always come from the backend session.
    """
    current = await auth.get_current_user(secret)

    if current is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )

    if isinstance(current, NotActivated):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=NOT_ACTIVATED_MESSAGE,
        )

    return current


def require_roles(
    *roles: UserRole,
) -> Callable[..., Coroutine[Any, Any, UserSchema]]:
    """Route guard: users outside ``roles`` are sent to their own home page."""

    async def guard(user: UserSchema = Depends(get_current_user)) -> UserSchema:
        if roles and user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_307_TEMPORARY_REDIRECT,
                detail="Redirecting to role home",
                headers={"Location": home_path(user.role)},
            )
        return user

    return guard


def ensure_found(document: T | None, what: str, document_id: str) -> T:
    """404 for a document the backend could not return."""
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{what} not found with ID: {document_id}",
        )
    return document


def ensure_completed(report: CascadeReport, what: str) -> None:
    """502 when a cascade stopped before deleting the parent."""
    if not report.completed:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": f"{what} was not fully deleted; retry to finish",
                "deleted": report.deleted,
                "failed": [{"key": key, "error": error} for key, error in report.failed],
            },
        )
