"""
User Schemas

Pydantic models for user documents and the forms that create them.
"""

from pydantic import Field

from eduportal.core.roles import UserRole

from .base import CamelModel, DocumentModel


class UserSchema(DocumentModel):
    """User document (one per backend account, sharing its ID)."""

    name: str
    email: str
    role: UserRole
    is_active: bool = False
    group_id: str | None = None


class LoginRequest(CamelModel):
    """Login form."""

    email: str
    password: str


class RegisterRequest(CamelModel):
    """Self-registration form.

    ``role`` is ignored while no admin exists: the first account becomes admin.
    """

    name: str = Field(..., min_length=1, max_length=128)
    email: str
    password: str
    confirm_password: str | None = None
    role: UserRole | None = None


class UserCreate(CamelModel):
    """Account created by an admin (curators) or a curator (teachers, students)."""

    name: str = Field(..., min_length=1, max_length=128)
    email: str
    password: str
    confirm_password: str | None = None
    role: UserRole = UserRole.STUDENT


class UserUpdate(CamelModel):
    """Fields a curator may edit on an existing user."""

    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None
    group_id: str | None = None


class FirstUserStatus(CamelModel):
    """Whether the next registration becomes the bootstrap admin."""

    is_first_user: bool
