"""
Backend Service Client

Thin async wrapper over the hosted backend's REST API (Appwrite-compatible):
account/session endpoints and the document database.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import Any

import httpx

from eduportal.config import settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = 429

# Most values a single equal() query may carry
MAX_QUERY_VALUES = 100


class BackendError(Exception):
    """Backend API error."""

    def __init__(self, message: str, *, code: int = 0, type: str = "unknown"):  # noqa: A002
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type


class UnauthorizedError(BackendError):
    """Missing or expired session (401)."""


class NotFoundError(BackendError):
    """Document or account does not exist (404)."""


class RateLimitError(BackendError):
    """Too many requests (429)."""


_ERRORS_BY_CODE: dict[int, type[BackendError]] = {
    401: UnauthorizedError,
    404: NotFoundError,
    429: RateLimitError,
}


class ID:
    """Document ID helpers."""

    @staticmethod
    def unique() -> str:
        """Placeholder asking the backend to generate the ID."""
        return "unique()"


class Query:
    """Query string builders for list endpoints."""

    @staticmethod
    def _build(method: str, attribute: str | None, values: list[Any]) -> str:
        query: dict[str, Any] = {"method": method}
        if attribute is not None:
            query["attribute"] = attribute
        query["values"] = values
        return json.dumps(query)

    @staticmethod
    def equal(attribute: str, value: Any) -> str:
        values = value if isinstance(value, list) else [value]
        return Query._build("equal", attribute, values)

    @staticmethod
    def search(attribute: str, value: str) -> str:
        return Query._build("search", attribute, [value])

    @staticmethod
    def limit(limit: int) -> str:
        return Query._build("limit", None, [limit])

    @staticmethod
    def cursor_after(document_id: str) -> str:
        return Query._build("cursorAfter", None, [document_id])


class BackendClient:
    """Client for the backend's account and database APIs.

    Reads that get a 429 back are retried with exponential backoff; every
    other failure is raised to the caller as a ``BackendError``.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        project_id: str,
        database_id: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 0.5,
        retry_max_delay: float = 8.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize backend client.

        Args:
            endpoint: REST base URL (e.g. https://cloud.appwrite.io/v1)
            project_id: Backend project ID
            database_id: Document database ID
            api_key: Optional server API key
            timeout: Request timeout in seconds
            max_retries: Retries for rate-limited reads
            retry_base_delay: First backoff delay in seconds
            retry_max_delay: Backoff ceiling in seconds
            http_client: Shared HTTP client (one is created when omitted)
        """
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id
        self.database_id = database_id
        self.api_key = api_key or None
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls) -> BackendClient:
        """Create client from application settings."""
        return cls(
            endpoint=settings.APPWRITE_ENDPOINT,
            project_id=settings.APPWRITE_PROJECT_ID,
            database_id=settings.APPWRITE_DATABASE_ID,
            api_key=settings.APPWRITE_API_KEY,
            timeout=settings.BACKEND_TIMEOUT,
            max_retries=settings.BACKEND_MAX_RETRIES,
            retry_base_delay=settings.BACKEND_RETRY_BASE_DELAY,
            retry_max_delay=settings.BACKEND_RETRY_MAX_DELAY,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    async def create_account(
        self, *, user_id: str, email: str, password: str, name: str
    ) -> dict[str, Any]:
        """Create an auth account. Returns the account object."""
        return await self._request(
            "POST",
            "/account",
            json={"userId": user_id, "email": email, "password": password, "name": name},
            use_key=False,
        )

    async def create_email_session(self, *, email: str, password: str) -> dict[str, Any]:
        """Open an email/password session.

        The returned session always carries ``secret``: servers with an API
        key get it in the body, otherwise it is read from the session cookie.
        """
        response = await self._send(
            "POST", "/account/sessions/email", json={"email": email, "password": password}
        )
        session: dict[str, Any] = response.json()

        if not session.get("secret"):
            cookie_name = f"a_session_{self.project_id}".lower()
            for name, value in response.cookies.items():
                if name.lower() == cookie_name:
                    session["secret"] = value
                    break

        return session

    async def get_account(self, *, session: str) -> dict[str, Any]:
        """Account behind a session secret; raises UnauthorizedError for guests."""
        return await self._request("GET", "/account", session=session, use_key=False)

    async def delete_session(self, *, session: str, session_id: str = "current") -> None:
        await self._request(
            "DELETE", f"/account/sessions/{session_id}", session=session, use_key=False
        )

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    def _documents_path(self, collection_id: str, document_id: str | None = None) -> str:
        path = f"/databases/{self.database_id}/collections/{collection_id}/documents"
        if document_id is not None:
            path = f"{path}/{document_id}"
        return path

    async def list_documents(
        self, collection_id: str, queries: list[str] | None = None
    ) -> dict[str, Any]:
        """List documents. Returns ``{"total": int, "documents": [...]}``."""
        params = {"queries[]": queries} if queries else None
        result: dict[str, Any] = await self._request(
            "GET", self._documents_path(collection_id), params=params
        )
        result.setdefault("documents", [])
        result.setdefault("total", len(result["documents"]))
        return result

    async def get_document(self, collection_id: str, document_id: str) -> dict[str, Any]:
        return await self._request("GET", self._documents_path(collection_id, document_id))

    async def create_document(
        self,
        collection_id: str,
        data: dict[str, Any],
        document_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            self._documents_path(collection_id),
            json={"documentId": document_id or ID.unique(), "data": data},
        )

    async def update_document(
        self, collection_id: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "PATCH", self._documents_path(collection_id, document_id), json={"data": data}
        )

    async def delete_document(self, collection_id: str, document_id: str) -> None:
        await self._request("DELETE", self._documents_path(collection_id, document_id))

    async def ping(self) -> bool:
        """Check that the backend answers at all."""
        try:
            response = await self._client.request(
                "GET", f"{self.endpoint}/health/version", headers=self._headers()
            )
        except httpx.HTTPError as e:
            logger.warning(f"Backend unreachable: {e}")
            return False
        return response.status_code < 500

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self, session: str | None = None, use_key: bool = True) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "X-Appwrite-Project": self.project_id,
        }
        if use_key and self.api_key:
            headers["X-Appwrite-Key"] = self.api_key
        if session:
            headers["X-Appwrite-Session"] = session
        return headers

    def _retry_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter."""
        delay = min(self.retry_base_delay * (2**attempt), self.retry_max_delay)
        return delay + delay * random.uniform(0, 0.25)  # nosec B311 - jitter only

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,  # noqa: A002
        params: dict[str, Any] | None = None,
        session: str | None = None,
        use_key: bool = True,
    ) -> Any:
        response = await self._send(
            method, path, json=json, params=params, session=session, use_key=use_key
        )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,  # noqa: A002
        params: dict[str, Any] | None = None,
        session: str | None = None,
        use_key: bool = True,
    ) -> httpx.Response:
        url = f"{self.endpoint}{path}"
        attempt = 0

        while True:
            try:
                response = await self._client.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=self._headers(session, use_key),
                )
            except httpx.HTTPError as e:
                logger.error(f"HTTP error calling backend {method} {path}: {e}")
                raise BackendError(f"HTTP error: {e}") from e

            if response.status_code < 400:
                return response

            if (
                response.status_code == RETRYABLE_STATUS
                and method == "GET"
                and attempt < self.max_retries
            ):
                delay = self._retry_delay(attempt)
                attempt += 1
                logger.warning(
                    f"Backend rate limited {method} {path} "
                    f"(attempt {attempt}/{self.max_retries}), retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            raise self._error_from(response, method, path)

    @staticmethod
    def _error_from(response: httpx.Response, method: str, path: str) -> BackendError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or response.text or "Unknown error"
        code = int(body.get("code") or response.status_code)
        error_type = body.get("type", "unknown")

        logger.error(
            f"Backend API error: {code} - {message}",
            extra={"method": method, "path": path, "type": error_type},
        )
        error_cls = _ERRORS_BY_CODE.get(response.status_code, BackendError)
        return error_cls(message, code=code, type=error_type)
