"""
User Roles

Closed role enum and the total mapping from role to home route.
"""

from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    """Role tag stored on every user document."""

    ADMIN = "admin"
    CURATOR = "curator"
    TEACHER = "teacher"
    STUDENT = "student"


LOGIN_PATH = "/login"
REGISTER_PATH = "/register"

HOME_PATHS: dict[UserRole, str] = {
    UserRole.ADMIN: "/admin",
    UserRole.CURATOR: "/curator",
    UserRole.TEACHER: "/teacher",
    UserRole.STUDENT: "/student",
}


def parse_role(value: object) -> UserRole | None:
    """Return the matching role, or None for anything unrecognized."""
    if isinstance(value, UserRole):
        return value
    if isinstance(value, str):
        try:
            return UserRole(value)
        except ValueError:
            return None
    return None


def home_path(role: object) -> str:
    """Home route for a role; unknown roles land on the login page."""
    parsed = parse_role(role)
    if parsed is None:
        return LOGIN_PATH
    return HOME_PATHS[parsed]


def role_for_path(path: str) -> UserRole | None:
    """Role whose namespace contains ``path``, if any.

    Matching is by prefix, so ``/teachers`` falls under ``/teacher``.
    """
    for role, prefix in HOME_PATHS.items():
        if path.startswith(prefix):
            return role
    return None
