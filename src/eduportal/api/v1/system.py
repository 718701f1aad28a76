"""
Public API Endpoints

Unauthenticated helpers used by the registration form.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from eduportal.api.deps import get_auth
from eduportal.backend import BackendError
from eduportal.services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/check-admins")
async def check_admins(auth: AuthService = Depends(get_auth)) -> JSONResponse:
    """Report whether no admin exists yet, so the next signup becomes one."""
    try:
        is_first_user = await auth.is_first_user()
    except BackendError as e:
        logger.error(f"Error checking for admins: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Server error"},
        )

    return JSONResponse(content={"isFirstUser": is_first_user})
