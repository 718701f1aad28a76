"""
Session Snapshot

The serialized ``{"state": {"user": {...}}}`` object mirrored into the
auth cookie. The gate reads it on every request; auth endpoints write or
clear it explicitly after each mutation.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote

from starlette.responses import Response

from eduportal.config import settings
from eduportal.core.roles import UserRole, parse_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSnapshot:
    """User record as persisted client-side; ``user`` is None when anonymous."""

    user: dict[str, Any] | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_active(self) -> bool:
        return self.user is not None and self.user.get("isActive") is True

    @property
    def role(self) -> UserRole | None:
        if self.user is None:
            return None
        return parse_role(self.user.get("role"))

    @property
    def user_id(self) -> str | None:
        if self.user is None:
            return None
        user_id = self.user.get("$id")
        return user_id if isinstance(user_id, str) else None

    @classmethod
    def from_cookie(cls, raw: str | None) -> SessionSnapshot:
        """Parse a cookie value; anything malformed is treated as anonymous."""
        if not raw:
            return cls()

        for candidate in (raw, unquote(raw)):
            try:
                parsed = json.loads(candidate)
            except (TypeError, ValueError):
                continue
            if not isinstance(parsed, dict):
                return cls()
            state = parsed.get("state")
            if not isinstance(state, dict):
                return cls()
            user = state.get("user")
            return cls(user=user if isinstance(user, dict) and user else None)

        logger.debug("Discarding malformed session cookie")
        return cls()

    def to_cookie(self) -> str:
        """URL-encoded JSON, the format the gate expects."""
        return quote(json.dumps({"state": {"user": self.user}}, separators=(",", ":")), safe="")

    def sync(self, response: Response) -> None:
        """Write the snapshot cookie, or delete it when nobody is signed in."""
        if self.user is None:
            response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
            return

        response.set_cookie(
            settings.AUTH_COOKIE_NAME,
            self.to_cookie(),
            max_age=settings.AUTH_COOKIE_MAX_AGE,
            path="/",
            samesite="lax",
        )


def set_backend_session(response: Response, secret: str | None) -> None:
    """Store (or clear) the backend session secret in an HTTP-only cookie."""
    if not secret:
        response.delete_cookie(settings.BACKEND_SESSION_COOKIE_NAME, path="/")
        return

    response.set_cookie(
        settings.BACKEND_SESSION_COOKIE_NAME,
        secret,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
