"""
API Tests for registration, login, logout and the session check.
"""

import json
from urllib.parse import unquote

from httpx import AsyncClient

from eduportal.backend import BackendError
from eduportal.config import settings


def set_cookies(response) -> dict[str, str]:
    """Set-Cookie headers of a response keyed by cookie name."""
    cookies = {}
    for header in response.headers.get_list("set-cookie"):
        name, rest = header.split("=", 1)
        cookies[name] = rest
    return cookies


def snapshot_user(response) -> dict | None:
    value = set_cookies(response)[settings.AUTH_COOKIE_NAME].split(";", 1)[0]
    return json.loads(unquote(value))["state"]["user"]


async def register(client: AsyncClient, email: str, **extra) -> dict:
    body = {"name": "Ada Lovelace", "email": email, "password": "password1", **extra}
    response = await client.post("/register", json=body)
    assert response.status_code == 201
    return response.json()


class TestCheckAdmins:
    """Test the public first-user check."""

    async def test_first_user_when_no_admin(self, client: AsyncClient):
        response = await client.get("/api/check-admins")

        assert response.status_code == 200
        assert response.json() == {"isFirstUser": True}

    async def test_not_first_user_once_admin_exists(self, client: AsyncClient, seed_user):
        seed_user("admin")

        response = await client.get("/api/check-admins")

        assert response.json() == {"isFirstUser": False}

    async def test_backend_failure(self, client: AsyncClient, backend):
        async def broken(*args, **kwargs):
            raise BackendError("Server Error", code=500)

        backend.list_documents = broken

        response = await client.get("/api/check-admins")

        assert response.status_code == 500
        assert response.json() == {"message": "Server error"}


class TestRegister:
    async def test_first_registration_creates_admin(self, client: AsyncClient):
        status = await client.get("/register")
        assert status.json() == {"isFirstUser": True}

        data = await register(client, "first@school.test", role="student")

        assert data["data"]["role"] == "admin"
        assert data["data"]["isActive"] is True
        assert data["message"].startswith("Administrator account created")

    async def test_later_registration_waits_for_activation(self, client: AsyncClient):
        await register(client, "first@school.test")

        data = await register(client, "second@school.test", role="student")

        assert data["data"]["role"] == "student"
        assert data["data"]["isActive"] is False
        assert "after activation" in data["message"]

    async def test_short_password_rejected(self, client: AsyncClient, backend):
        response = await client.post(
            "/register",
            json={"name": "Ada", "email": "a@school.test", "password": "1234567"},
        )

        assert response.status_code == 422
        assert "at least 8 characters" in response.json()["detail"]
        assert backend.accounts == {}

    async def test_duplicate_email_conflict(self, client: AsyncClient):
        await register(client, "first@school.test")

        response = await client.post(
            "/register",
            json={"name": "Ada", "email": "first@school.test", "password": "password1"},
        )

        assert response.status_code == 409


class TestLoginLogout:
    async def test_login_sets_both_cookies(self, client: AsyncClient):
        await register(client, "boss@school.test")

        response = await client.post(
            "/login", json={"email": "boss@school.test", "password": "password1"}
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        cookies = set_cookies(response)
        assert settings.BACKEND_SESSION_COOKIE_NAME in cookies
        assert snapshot_user(response)["email"] == "boss@school.test"
        assert "Max-Age=604800" in cookies[settings.AUTH_COOKIE_NAME]

    async def test_wrong_password(self, client: AsyncClient):
        await register(client, "boss@school.test")

        response = await client.post(
            "/login", json={"email": "boss@school.test", "password": "wrong-password"}
        )

        assert response.status_code == 401

    async def test_inactive_account_refused(self, client: AsyncClient):
        await register(client, "boss@school.test")
        await register(client, "new@school.test")

        response = await client.post(
            "/login", json={"email": "new@school.test", "password": "password1"}
        )

        assert response.status_code == 403
        assert "activation" in response.json()["detail"]
        assert "Max-Age=0" in set_cookies(response)[settings.AUTH_COOKIE_NAME]

    async def test_logout_clears_cookies(self, client: AsyncClient, backend, snapshot_headers):
        await register(client, "boss@school.test")
        login = await client.post(
            "/login", json={"email": "boss@school.test", "password": "password1"}
        )
        user = snapshot_user(login)
        secret = next(iter(backend.sessions))

        response = await client.post("/logout", headers=snapshot_headers(user, secret))

        assert response.status_code == 200
        assert response.json()["message"] == "Signed out"
        assert backend.sessions == {}
        cookies = set_cookies(response)
        assert "Max-Age=0" in cookies[settings.AUTH_COOKIE_NAME]
        assert "Max-Age=0" in cookies[settings.BACKEND_SESSION_COOKIE_NAME]

    async def test_login_without_user_document_closes_session(
        self, client: AsyncClient, backend
    ):
        await backend.create_account(
            user_id="unique()", email="ghost@school.test", password="password1", name="Ghost"
        )

        response = await client.post(
            "/login", json={"email": "ghost@school.test", "password": "password1"}
        )

        assert response.status_code == 401
        assert backend.sessions == {}


class TestMe:
    async def test_me_refreshes_snapshot(self, client: AsyncClient, backend, snapshot_headers):
        await register(client, "boss@school.test")
        login = await client.post(
            "/login", json={"email": "boss@school.test", "password": "password1"}
        )
        user = snapshot_user(login)
        secret = next(iter(backend.sessions))
        backend.collection("users")[user["$id"]]["name"] = "Renamed"

        response = await client.get("/me", headers=snapshot_headers(user, secret))

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert snapshot_user(response)["name"] == "Renamed"

    async def test_expired_backend_session(
        self, client: AsyncClient, seed_user, snapshot_headers
    ):
        admin = seed_user("admin")

        response = await client.get("/me", headers=snapshot_headers(admin, "gone"))

        assert response.status_code == 401
        assert "Max-Age=0" in set_cookies(response)[settings.AUTH_COOKIE_NAME]

    async def test_snapshot_alone_is_not_a_session(
        self, client: AsyncClient, seed_user, snapshot_headers
    ):
        teacher = seed_user("teacher")

        response = await client.get("/me", headers=snapshot_headers(teacher))

        assert response.status_code == 401
        assert "Max-Age=0" in set_cookies(response)[settings.AUTH_COOKIE_NAME]

    async def test_identity_comes_from_backend_session(
        self, client: AsyncClient, backend, seed_user, snapshot_headers
    ):
        student = seed_user("student")
        admin = seed_user("admin")
        secret = backend.open_session(student)

        response = await client.get("/me", headers=snapshot_headers(admin, secret))

        assert response.status_code == 200
        assert response.json()["$id"] == student["$id"]
        assert snapshot_user(response)["role"] == "student"
