"""
Access-Control Decision

Pure function deciding, from a path and the session snapshot cookie,
whether a request passes through or gets redirected.
"""

from __future__ import annotations

from dataclasses import dataclass

from eduportal.core.roles import LOGIN_PATH, REGISTER_PATH, home_path, role_for_path
from eduportal.core.session import SessionSnapshot


@dataclass(frozen=True)
class AccessDecision:
    """Either allow the request or redirect it to ``location``."""

    location: str | None = None

    @property
    def allowed(self) -> bool:
        return self.location is None

    @classmethod
    def allow(cls) -> AccessDecision:
        return cls()

    @classmethod
    def redirect(cls, location: str) -> AccessDecision:
        return cls(location=location)


def decide(path: str, snapshot: SessionSnapshot) -> AccessDecision:
    """Apply the routing gate to an already parsed snapshot."""
    signed_in = snapshot.is_authenticated and snapshot.is_active
    role = snapshot.user.get("role") if snapshot.user else None

    if path.startswith(LOGIN_PATH) or path.startswith(REGISTER_PATH):
        # An unrecognized role maps home to /login itself; let it through.
        if signed_in and home_path(role) != LOGIN_PATH:
            return AccessDecision.redirect(home_path(role))
        return AccessDecision.allow()

    if not signed_in:
        return AccessDecision.redirect(LOGIN_PATH)

    namespace = role_for_path(path)
    if namespace is not None and namespace != snapshot.role:
        return AccessDecision.redirect(home_path(role))

    if path == "/":
        return AccessDecision.redirect(home_path(role))

    return AccessDecision.allow()


def decide_access(path: str, session_cookie: str | None) -> AccessDecision:
    """Gate a request from its raw ``auth-storage`` cookie value."""
    return decide(path, SessionSnapshot.from_cookie(session_cookie))
