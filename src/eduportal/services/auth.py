"""
Authentication Service

Registration (with the first-admin bootstrap rule), login, logout and
the "who is signed in" check against the backend's account API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eduportal.backend import BackendClient, BackendError, UnauthorizedError
from eduportal.core.roles import UserRole
from eduportal.core.schemas import RegisterRequest, UserCreate, UserSchema
from eduportal.core.validation import validate_password

from .users import UserService

logger = logging.getLogger(__name__)

NOT_ACTIVATED_MESSAGE = "Your account is waiting for activation by an administrator or curator."


class AuthError(Exception):
    """Login could not produce a signed-in user."""

    pass


class AccountNotActivatedError(AuthError):
    """Credentials are valid but the account has not been activated yet."""

    def __init__(self, message: str = NOT_ACTIVATED_MESSAGE):
        super().__init__(message)


@dataclass(frozen=True)
class NotActivated:
    """Marker returned for a valid session whose user is still inactive."""

    user: UserSchema


@dataclass(frozen=True)
class LoginResult:
    """Signed-in user and the backend session secret to keep."""

    user: UserSchema
    secret: str


class AuthService:
    """Account flows on top of the backend and the users collection."""

    def __init__(self, backend: BackendClient, users: UserService | None = None):
        self.backend = backend
        self.users = users or UserService(backend)

    async def is_first_user(self) -> bool:
        """True while no admin-role user exists."""
        return await self.users.count_admins() == 0

    async def get_current_user(self, secret: str | None) -> UserSchema | NotActivated | None:
        """Resolve a backend session to its user document.

        Returns None for guests or unknown users, and ``NotActivated`` for
        inactive non-admin users.
        """
        if not secret:
            return None

        try:
            account = await self.backend.get_account(session=secret)
        except UnauthorizedError:
            logger.debug("Session is not authorized (guest)")
            return None

        try:
            user = await self.users.find_by_email(account["email"])
        except BackendError as e:
            logger.error(f"Error loading user for current session: {e}")
            return None

        if user is None:
            logger.warning(f"No user document for account {account.get('$id')}")
            return None

        if not user.is_active and user.role != UserRole.ADMIN:
            return NotActivated(user)

        return user

    async def register(self, request: RegisterRequest) -> UserSchema:
        """Register a new account.

        While no admin exists, the new user becomes an active admin whatever
        role was requested. Afterwards the requested role (teacher by
        default) is kept and the account waits for activation.
        """
        validate_password(request.password, request.confirm_password)

        first_user = await self.is_first_user()
        role = UserRole.ADMIN if first_user else request.role or UserRole.TEACHER

        user = await self.users.create_user(
            UserCreate(
                name=request.name,
                email=request.email,
                password=request.password,
                confirm_password=request.confirm_password,
                role=role,
            ),
            active=first_user,
        )

        if first_user:
            logger.info(f"User {user.id} registered as the first administrator")
        return user

    async def login(
        self, email: str, password: str, existing_secret: str | None = None
    ) -> LoginResult:
        """Open a new backend session, replacing any previous one.

        Raises:
            AccountNotActivatedError: The user exists but is not active yet
            AuthError: No user document matches the account
            BackendError: Wrong credentials or backend failure
        """
        if existing_secret:
            try:
                await self.backend.delete_session(session=existing_secret)
            except BackendError as e:
                logger.debug(f"Previous session already gone: {e}")

        session = await self.backend.create_email_session(
            email=email.strip().lower(), password=password
        )
        secret = session.get("secret", "")

        result = await self.get_current_user(secret)

        if isinstance(result, NotActivated):
            await self.backend.delete_session(session=secret)
            logger.info(f"Login refused for inactive user {result.user.id}")
            raise AccountNotActivatedError()

        if result is None:
            await self.backend.delete_session(session=secret)
            raise AuthError("Could not load user data")

        logger.info(f"User {result.id} signed in", extra={"role": result.role.value})
        return LoginResult(user=result, secret=secret)

    async def logout(self, secret: str | None) -> None:
        if not secret:
            return
        await self.backend.delete_session(session=secret)
        logger.info("Session deleted")
