"""
API Tests for the access-control gate and route guards.
"""

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from eduportal.api.deps import require_roles
from eduportal.core.roles import UserRole
from eduportal.core.schemas import UserSchema

FORGED_ADMIN = {
    "$id": "x1",
    "name": "Mallory",
    "email": "m@school.test",
    "role": "admin",
    "isActive": True,
}


class TestGateRedirects:
    """Redirects issued by the middleware before routing."""

    async def test_anonymous_sent_to_login(self, client: AsyncClient):
        response = await client.get("/admin")

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    async def test_anonymous_post_redirect_uses_303(self, client: AsyncClient):
        response = await client.post("/curator/groups", json={})

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    async def test_foreign_namespace_sends_home(self, client: AsyncClient, seed_user, signed_in):
        teacher = seed_user("teacher")

        response = await client.get("/admin/curators", headers=signed_in(teacher))

        assert response.status_code == 307
        assert response.headers["location"] == "/teacher"

    async def test_active_admin_on_login_page(self, client: AsyncClient, seed_user, signed_in):
        admin = seed_user("admin")

        response = await client.get("/login", headers=signed_in(admin))

        assert response.status_code == 307
        assert response.headers["location"] == "/admin"

    async def test_inactive_user_sent_to_login(self, client: AsyncClient, seed_user, signed_in):
        student = seed_user("student", active=False)

        response = await client.get("/student/grades", headers=signed_in(student))

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    async def test_root_sends_home(self, client: AsyncClient, seed_user, signed_in):
        curator = seed_user("curator")

        response = await client.get("/", headers=signed_in(curator))

        assert response.headers["location"] == "/curator"

    @pytest.mark.parametrize("path", ["/api/check-admins", "/health/live"])
    async def test_ungated_paths(self, client: AsyncClient, path):
        response = await client.get(path)

        assert response.status_code == 200


class TestRequireRoles:
    """The dependency guard mirrors the gate after routing."""

    async def test_other_role_redirected_home(self):
        guard = require_roles(UserRole.ADMIN)
        student = UserSchema.model_validate(
            {"$id": "s1", "name": "Sam", "email": "s@school.test", "role": "student"}
        )

        with pytest.raises(HTTPException) as exc_info:
            await guard(student)

        assert exc_info.value.status_code == 307
        assert exc_info.value.headers == {"Location": "/student"}

    async def test_allowed_role_passes(self):
        guard = require_roles(UserRole.ADMIN, UserRole.CURATOR)
        curator = UserSchema.model_validate(
            {"$id": "c1", "name": "Cora", "email": "c@school.test", "role": "curator"}
        )

        assert await guard(curator) is curator


class TestForgedSnapshot:
    """Route guards identify the user from the backend session, not the snapshot."""

    async def test_snapshot_without_session_is_rejected(
        self, client: AsyncClient, backend, seed_user, snapshot_headers
    ):
        teacher = seed_user("teacher", active=False)

        activate = await client.post(
            f"/admin/users/{teacher['$id']}/activate",
            headers=snapshot_headers(FORGED_ADMIN),
        )
        create = await client.post(
            "/admin/curators",
            json={"name": "Eve", "email": "eve@school.test", "password": "password1"},
            headers=snapshot_headers(FORGED_ADMIN),
        )

        assert activate.status_code == 401
        assert create.status_code == 401
        assert backend.collection("users")[teacher["$id"]]["isActive"] is False
        assert "eve@school.test" not in backend.accounts

    async def test_snapshot_role_cannot_elevate_real_session(
        self, client: AsyncClient, backend, seed_user, snapshot_headers
    ):
        student = seed_user("student")
        secret = backend.open_session(student)

        response = await client.get("/admin", headers=snapshot_headers(FORGED_ADMIN, secret))

        assert response.status_code == 307
        assert response.headers["location"] == "/student"

    async def test_inactive_session_forbidden(
        self, client: AsyncClient, backend, seed_user, snapshot_headers
    ):
        teacher = seed_user("teacher", active=False)
        secret = backend.open_session(teacher)
        snapshot = {**teacher, "isActive": True}

        response = await client.get("/teacher", headers=snapshot_headers(snapshot, secret))

        assert response.status_code == 403
