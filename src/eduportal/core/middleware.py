"""
HTTP Middleware

Routing gate applied to every page request before it reaches a router.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from eduportal.config import settings
from eduportal.core.access import decide
from eduportal.core.session import SessionSnapshot

logger = logging.getLogger(__name__)

# Paths the gate never inspects (API, health probes, docs, assets)
UNGATED_PREFIXES: tuple[str, ...] = (
    "/api",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/static",
    "/favicon.ico",
)


def is_gated(path: str) -> bool:
    """Check if path goes through the access-control gate."""
    return not path.startswith(UNGATED_PREFIXES)


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Redirect requests the session snapshot does not allow.

    The parsed snapshot is attached as ``request.state.session``. It only
    steers redirects; route guards resolve the user from the backend session.
    """

    def __init__(self, app: ASGIApp, cookie_name: str | None = None):
        super().__init__(app)
        self.cookie_name = cookie_name or settings.AUTH_COOKIE_NAME

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        snapshot = SessionSnapshot.from_cookie(request.cookies.get(self.cookie_name))
        request.state.session = snapshot

        path = request.url.path
        if not is_gated(path):
            return await call_next(request)

        decision = decide(path, snapshot)
        if decision.allowed:
            return await call_next(request)

        logger.debug(
            f"Gate redirect {path} -> {decision.location}",
            extra={"role": snapshot.role, "active": snapshot.is_active},
        )
        # 303 turns a rejected form POST into a plain GET of the target page
        status_code = 307 if request.method in ("GET", "HEAD") else 303
        return RedirectResponse(url=decision.location, status_code=status_code)
