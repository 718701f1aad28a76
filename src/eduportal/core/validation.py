"""
Input validation functions for EduPortal.

All validation functions follow the pattern:
1. Accept raw user input (string, int, etc.)
2. Normalize/clean the input
3. Validate against business rules
4. Return cleaned value or raise ValidationError

Every check runs before any call to the backend service.
"""

import re

from eduportal.core.roles import UserRole, parse_role

MIN_PASSWORD_LENGTH = 8
MIN_SCORE = 0
MAX_SCORE = 100

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(Exception):
    """Raised when user input fails validation."""

    pass


# ============================================================================
# Credentials
# ============================================================================


def validate_password(password: str | None, confirm_password: str | None = None) -> str:
    """
    Validate a password from a registration or user-creation form.

    Args:
        password: Raw password input
        confirm_password: Repeated password, when the form asks for one

    Returns:
        The password, unchanged

    Raises:
        ValidationError: If passwords differ or the password is too short
    """
    if password is None or password == "":
        raise ValidationError("Password cannot be empty")

    if confirm_password is not None and password != confirm_password:
        raise ValidationError("Passwords do not match")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    return password


def validate_email(email: str | None) -> str:
    """Normalize an email address to lowercase and check its shape."""
    if email is None or email.strip() == "":
        raise ValidationError("Email cannot be empty")

    cleaned = email.strip().lower()
    if not EMAIL_PATTERN.match(cleaned):
        raise ValidationError("Invalid email address")

    return cleaned


def validate_name(name: str | None) -> str:
    """Collapse whitespace in a person's full name."""
    if name is None:
        raise ValidationError("Name cannot be empty")

    cleaned = re.sub(r"\s+", " ", name.strip())
    if cleaned == "":
        raise ValidationError("Name cannot be empty")

    if len(cleaned) > 128:
        raise ValidationError("Name cannot exceed 128 characters")

    return cleaned


def validate_role(value: str | None) -> UserRole:
    """Map raw input onto the closed role enum."""
    role = parse_role(value)
    if role is None:
        raise ValidationError(f"Unknown role: {value}")
    return role


# ============================================================================
# Content
# ============================================================================


def validate_title(value: str | None, field: str = "Title") -> str:
    """
    Validate a group, lesson or survey title (or a question text).

    Args:
        value: Raw input
        field: Field label used in the error message

    Returns:
        Stripped value

    Raises:
        ValidationError: If the value is empty after stripping
    """
    if value is None or value.strip() == "":
        raise ValidationError(f"{field} cannot be empty")

    return value.strip()


def _validate_range(value: int | None, field: str) -> int:
    if value is None:
        raise ValidationError(f"{field} is required")

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be a whole number")

    if value < MIN_SCORE or value > MAX_SCORE:
        raise ValidationError(f"{field} must be between {MIN_SCORE} and {MAX_SCORE}")

    return value


def validate_score(value: int | None) -> int:
    """Attendance score, 0-100."""
    return _validate_range(value, "Score")


def validate_answer_value(value: int | None) -> int:
    """Survey answer on the 0 (disagree) to 100 (agree) scale."""
    return _validate_range(value, "Answer value")
