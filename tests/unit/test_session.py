"""
Unit tests for the session snapshot cookie.
"""

import json
from urllib.parse import unquote

from starlette.responses import Response

from eduportal.config import settings
from eduportal.core.roles import UserRole
from eduportal.core.session import SessionSnapshot, set_backend_session

USER = {"$id": "u1", "name": "Ada", "email": "ada@school.test", "role": "curator", "isActive": True}


class TestSnapshotParsing:
    def test_round_trip_through_cookie(self):
        snapshot = SessionSnapshot.from_cookie(SessionSnapshot(USER).to_cookie())

        assert snapshot.user == USER
        assert snapshot.role is UserRole.CURATOR
        assert snapshot.user_id == "u1"
        assert snapshot.is_active is True

    def test_accepts_raw_json(self):
        raw = json.dumps({"state": {"user": USER}})
        assert SessionSnapshot.from_cookie(raw).is_authenticated

    def test_empty_user_is_anonymous(self):
        raw = json.dumps({"state": {"user": {}}})
        assert SessionSnapshot.from_cookie(raw).is_authenticated is False

    def test_null_user_is_anonymous(self):
        raw = json.dumps({"state": {"user": None}})
        assert SessionSnapshot.from_cookie(raw).user is None

    def test_garbage_is_anonymous(self):
        assert SessionSnapshot.from_cookie("%7Bbroken").user is None
        assert SessionSnapshot.from_cookie("").user is None
        assert SessionSnapshot.from_cookie(None).user is None


class TestSnapshotSync:
    def test_sync_writes_cookie(self):
        response = Response()
        SessionSnapshot(USER).sync(response)

        header = response.headers["set-cookie"]
        assert header.startswith(f"{settings.AUTH_COOKIE_NAME}=")
        assert "Max-Age=604800" in header
        assert "Path=/" in header

        value = header.split(";", 1)[0].split("=", 1)[1]
        assert json.loads(unquote(value)) == {"state": {"user": USER}}

    def test_sync_without_user_deletes_cookie(self):
        response = Response()
        SessionSnapshot().sync(response)

        header = response.headers["set-cookie"]
        assert header.startswith(f"{settings.AUTH_COOKIE_NAME}=")
        assert "Max-Age=0" in header

    def test_backend_session_cookie_is_http_only(self):
        response = Response()
        set_backend_session(response, "secret-1")

        header = response.headers["set-cookie"]
        assert header.startswith(f"{settings.BACKEND_SESSION_COOKIE_NAME}=secret-1")
        assert "HttpOnly" in header
