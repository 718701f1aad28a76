"""
Pytest Configuration and Fixtures

In-memory stand-in for the hosted backend, plus an HTTP client bound to
the application with that backend installed.
"""

import itertools
import json
from collections import defaultdict
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from eduportal.backend import MAX_QUERY_VALUES, BackendError, NotFoundError, UnauthorizedError
from eduportal.config import settings
from eduportal.core.session import SessionSnapshot

DEFAULT_PAGE_LIMIT = 25


class FakeBackend:
    """Documents and accounts kept in dicts, answering like the REST API.

    ``fail_deletes`` holds document IDs whose deletion fails with a 500;
    ``fail_creates`` holds ``(collection_id, attribute, value)`` triples that
    make matching document creations fail. ``max_page_size`` caps how many
    documents one list call returns, whatever limit was asked for.
    """

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.accounts: dict[str, dict[str, Any]] = {}
        self.sessions: dict[str, str] = {}
        self.deleted: list[tuple[str, str]] = []
        self.fail_deletes: set[str] = set()
        self.fail_creates: set[tuple[str, str, Any]] = set()
        self.max_page_size = 5000
        self.list_calls = 0
        self._ids = itertools.count(1)

    def new_id(self, prefix: str = "doc") -> str:
        return f"{prefix}{next(self._ids)}"

    def seed(self, collection_key: str, **data: Any) -> dict[str, Any]:
        """Insert a document into the collection named in ``settings.collections``."""
        collection_id = settings.collections[collection_key]
        doc_id = data.pop("id", None) or self.new_id(collection_key[:3])
        doc = {"$id": doc_id, **data}
        self.documents[collection_id][doc_id] = doc
        return dict(doc)

    def collection(self, collection_key: str) -> dict[str, dict[str, Any]]:
        return self.documents[settings.collections[collection_key]]

    # Account

    async def create_account(
        self, *, user_id: str, email: str, password: str, name: str
    ) -> dict[str, Any]:
        if email in self.accounts:
            raise BackendError(
                "A user with the same email already exists", code=409, type="user_already_exists"
            )
        account_id = self.new_id("acc") if user_id == "unique()" else user_id
        self.accounts[email] = {"$id": account_id, "email": email, "name": name, "pw": password}
        return {"$id": account_id, "email": email, "name": name}

    async def create_email_session(self, *, email: str, password: str) -> dict[str, Any]:
        account = self.accounts.get(email)
        if account is None or account["pw"] != password:
            raise UnauthorizedError("Invalid credentials", code=401, type="user_invalid_credentials")
        secret = self.new_id("secret")
        self.sessions[secret] = email
        return {"$id": self.new_id("session"), "userId": account["$id"], "secret": secret}

    def open_session(self, user: dict[str, Any]) -> str:
        """Account plus live session for a seeded user document; returns the secret."""
        self.accounts.setdefault(
            user["email"],
            {"$id": user["$id"], "email": user["email"], "name": user["name"], "pw": None},
        )
        secret = self.new_id("secret")
        self.sessions[secret] = user["email"]
        return secret

    async def get_account(self, *, session: str) -> dict[str, Any]:
        email = self.sessions.get(session)
        if email is None:
            raise UnauthorizedError("User (role: guests) missing scope (account)", code=401)
        account = self.accounts[email]
        return {"$id": account["$id"], "email": account["email"], "name": account["name"]}

    async def delete_session(self, *, session: str, session_id: str = "current") -> None:
        if self.sessions.pop(session, None) is None:
            raise UnauthorizedError("Session not found", code=401)

    # Database

    @staticmethod
    def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
        value = doc.get(query["attribute"])
        if query["method"] == "equal":
            return value in query["values"]
        if query["method"] == "search":
            if isinstance(value, list):
                return any(needle in value for needle in query["values"])
            return any(needle in str(value) for needle in query["values"])
        raise AssertionError(f"Unsupported query method {query['method']}")

    async def list_documents(
        self, collection_id: str, queries: list[str] | None = None
    ) -> dict[str, Any]:
        """Filter, then page the way the REST API does (25 by default, capped)."""
        docs = list(self.documents[collection_id].values())
        limit = DEFAULT_PAGE_LIMIT
        cursor = None
        for raw in queries or []:
            query = json.loads(raw)
            if query["method"] == "limit":
                limit = query["values"][0]
            elif query["method"] == "cursorAfter":
                cursor = query["values"][0]
            else:
                if len(query["values"]) > MAX_QUERY_VALUES:
                    raise BackendError(
                        "Too many query values", code=400, type="general_query_invalid"
                    )
                docs = [doc for doc in docs if self._matches(doc, query)]

        total = len(docs)
        if cursor is not None:
            ids = [doc["$id"] for doc in docs]
            docs = docs[ids.index(cursor) + 1 :]
        page = docs[: min(limit, self.max_page_size)]
        self.list_calls += 1
        return {"total": total, "documents": [dict(doc) for doc in page]}

    async def get_document(self, collection_id: str, document_id: str) -> dict[str, Any]:
        doc = self.documents[collection_id].get(document_id)
        if doc is None:
            raise NotFoundError("Document with the requested ID could not be found.", code=404)
        return dict(doc)

    async def create_document(
        self, collection_id: str, data: dict[str, Any], document_id: str | None = None
    ) -> dict[str, Any]:
        for failing_collection, attribute, value in self.fail_creates:
            if failing_collection == collection_id and data.get(attribute) == value:
                raise BackendError("Server Error", code=500, type="general_unknown")
        doc_id = document_id if document_id and document_id != "unique()" else self.new_id()
        doc = {"$id": doc_id, **data}
        self.documents[collection_id][doc_id] = doc
        return dict(doc)

    async def update_document(
        self, collection_id: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        doc = self.documents[collection_id].get(document_id)
        if doc is None:
            raise NotFoundError("Document with the requested ID could not be found.", code=404)
        doc.update(data)
        return dict(doc)

    async def delete_document(self, collection_id: str, document_id: str) -> None:
        if document_id in self.fail_deletes:
            raise BackendError("Server Error", code=500, type="general_unknown")
        if self.documents[collection_id].pop(document_id, None) is None:
            raise NotFoundError("Document with the requested ID could not be found.", code=404)
        self.deleted.append((collection_id, document_id))

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


def make_user(
    backend: FakeBackend,
    role: str,
    *,
    active: bool = True,
    name: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Seed a user document and return it in wire form."""
    name = name or f"{role.title()} User"
    email = extra.pop("email", None) or f"{backend.new_id(role)}@school.test"
    return backend.seed("users", name=name, email=email, role=role, isActive=active, **extra)


def session_cookie(user: dict[str, Any] | None, secret: str | None = None) -> dict[str, str]:
    """Request headers carrying the snapshot cookie for ``user``.

    With ``secret`` the backend session cookie is sent as well.
    """
    cookie = f"{settings.AUTH_COOKIE_NAME}={SessionSnapshot(user).to_cookie()}"
    if secret is not None:
        cookie += f"; {settings.BACKEND_SESSION_COOKIE_NAME}={secret}"
    return {"Cookie": cookie}


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def client(backend: FakeBackend) -> AsyncClient:
    """Test client for the app, wired to the in-memory backend."""
    from eduportal.main import app

    app.state.backend = backend
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def seed_user(backend: FakeBackend):
    """Factory seeding users into the in-memory backend."""

    def _seed(role: str, **kwargs: Any) -> dict[str, Any]:
        return make_user(backend, role, **kwargs)

    return _seed


@pytest.fixture
def signed_in(backend: FakeBackend):
    """Factory building the cookie header of a signed-in user.

    Opens a backend session for the user so route guards can resolve it.
    """

    def _headers(user: dict[str, Any]) -> dict[str, str]:
        return session_cookie(user, backend.open_session(user))

    return _headers


@pytest.fixture
def snapshot_headers():
    """Factory building cookie headers from a snapshot and an optional secret."""
    return session_cookie
