"""
Authentication Endpoints

Login, self-registration, logout and the session check. Each endpoint
that changes who is signed in syncs the snapshot cookie before returning.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from eduportal.api.deps import get_auth, get_backend_secret
from eduportal.core.schemas import (
    ActionResult,
    FirstUserStatus,
    LoginRequest,
    RegisterRequest,
    UserSchema,
)
from eduportal.core.session import SessionSnapshot, set_backend_session
from eduportal.services import AccountNotActivatedError, AuthError, AuthService, NotActivated
from eduportal.services.auth import NOT_ACTIVATED_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()


def signed_out(status_code: int, detail: str) -> JSONResponse:
    """Error response that also clears the session cookies."""
    response = JSONResponse(status_code=status_code, content={"detail": detail})
    SessionSnapshot().sync(response)
    set_backend_session(response, None)
    return response


@router.post("/login", response_model=UserSchema)
async def login(
    credentials: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth),
    secret: str | None = Depends(get_backend_secret),
) -> UserSchema | JSONResponse:
    """Sign in with email and password."""
    try:
        result = await auth.login(credentials.email, credentials.password, existing_secret=secret)
    except AccountNotActivatedError as e:
        return signed_out(status.HTTP_403_FORBIDDEN, str(e))
    except AuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

    set_backend_session(response, result.secret)
    SessionSnapshot(result.user.to_document()).sync(response)
    return result.user


@router.get("/register", response_model=FirstUserStatus)
async def registration_status(auth: AuthService = Depends(get_auth)) -> FirstUserStatus:
    """Tell the form whether this registration will create the first admin."""
    return FirstUserStatus(is_first_user=await auth.is_first_user())


@router.post(
    "/register",
    response_model=ActionResult[UserSchema],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    auth: AuthService = Depends(get_auth),
) -> ActionResult[UserSchema]:
    """Create an account.

    The first account becomes an active admin; later accounts wait for
    activation and must sign in once activated.
    """
    user = await auth.register(request)

    if user.is_active:
        message = "Administrator account created. You can sign in now."
    else:
        message = "Account created. You will get access after activation."
    return ActionResult(message=message, data=user)


@router.post("/logout", response_model=ActionResult[None])
async def logout(
    response: Response,
    auth: AuthService = Depends(get_auth),
    secret: str | None = Depends(get_backend_secret),
) -> ActionResult[None]:
    """End the backend session and clear both cookies."""
    await auth.logout(secret)
    SessionSnapshot().sync(response)
    set_backend_session(response, None)
    return ActionResult(message="Signed out")


@router.get("/me", response_model=UserSchema)
async def me(
    response: Response,
    auth: AuthService = Depends(get_auth),
    secret: str | None = Depends(get_backend_secret),
) -> UserSchema | JSONResponse:
    """Re-check the backend session and refresh the snapshot cookie.

    A missing or expired session clears both cookies.
    """
    current = await auth.get_current_user(secret)
    if current is None:
        if secret:
            logger.info("Backend session is no longer valid, clearing snapshot")
        return signed_out(status.HTTP_401_UNAUTHORIZED, "Session expired")
    if isinstance(current, NotActivated):
        return signed_out(status.HTTP_403_FORBIDDEN, NOT_ACTIVATED_MESSAGE)

    SessionSnapshot(current.to_document()).sync(response)
    return current
