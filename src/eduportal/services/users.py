"""
User Service

User documents, plus the backend accounts they are paired with.
"""

from __future__ import annotations

import asyncio
import logging

from eduportal.backend import ID, Query
from eduportal.core.roles import UserRole
from eduportal.core.schemas import UserCreate, UserSchema, UserUpdate
from eduportal.core.validation import validate_email, validate_name, validate_password

from .base import Repository, to_data

logger = logging.getLogger(__name__)


class UserService(Repository[UserSchema]):
    """Users collection."""

    collection_key = "users"
    schema = UserSchema

    async def by_role(self, role: UserRole) -> list[UserSchema]:
        return await self._list(Query.equal("role", role.value))

    async def inactive(self) -> list[UserSchema]:
        """Accounts waiting for activation, any role."""
        return await self._list(Query.equal("isActive", False))

    async def active_teachers(self) -> list[UserSchema]:
        return await self._list(
            Query.equal("role", UserRole.TEACHER.value), Query.equal("isActive", True)
        )

    async def find_by_email(self, email: str) -> UserSchema | None:
        """User document for an account email. Raises on backend errors."""
        users = await self._fetch(Query.equal("email", email))
        return users[0] if users else None

    async def by_ids(self, user_ids: list[str]) -> list[UserSchema]:
        """Fetch several users concurrently; missing ones are skipped."""
        results = await asyncio.gather(*(self.get(user_id) for user_id in user_ids))
        return [user for user in results if user is not None]

    async def count_admins(self) -> int:
        return await self._count(Query.equal("role", UserRole.ADMIN.value))

    async def count_inactive(self) -> int:
        return await self._count(Query.equal("isActive", False))

    async def create_user(self, user_data: UserCreate, *, active: bool | None = None) -> UserSchema:
        """Create an account and its user document under the same ID.

        Args:
            user_data: Form data (validated here, before any network call)
            active: Activation flag; defaults to active only for admins

        Returns:
            The created user document
        """
        name = validate_name(user_data.name)
        email = validate_email(user_data.email)
        password = validate_password(user_data.password, user_data.confirm_password)
        is_active = user_data.role == UserRole.ADMIN if active is None else active

        account = await self.backend.create_account(
            user_id=ID.unique(), email=email, password=password, name=name
        )

        user = await self._create(
            {
                "name": name,
                "email": email,
                "role": user_data.role.value,
                "isActive": is_active,
            },
            document_id=account["$id"],
        )
        logger.info(
            f"User {user.id} created",
            extra={"role": user.role.value, "active": is_active},
        )
        return user

    async def update(self, user_id: str, user_update: UserUpdate) -> UserSchema:
        data = to_data(user_update)
        if "email" in data and data["email"] is not None:
            data["email"] = validate_email(data["email"])
        if "name" in data and data["name"] is not None:
            data["name"] = validate_name(data["name"])
        return await self._update(user_id, data)

    async def activate(self, user_id: str) -> UserSchema:
        user = await self._update(user_id, {"isActive": True})
        logger.info(f"User {user_id} activated")
        return user

    async def deactivate(self, user_id: str) -> UserSchema:
        user = await self._update(user_id, {"isActive": False})
        logger.info(f"User {user_id} deactivated")
        return user
