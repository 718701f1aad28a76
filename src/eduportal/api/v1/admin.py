"""
Admin API Endpoints

Account activation and curator management.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import asyncio

from fastapi import APIRouter, Depends, status

from eduportal.api.deps import get_users, require_roles
from eduportal.core.roles import UserRole
from eduportal.core.schemas import ActionResult, AdminDashboard, UserCreate, UserSchema
from eduportal.services import UserService

require_admin = require_roles(UserRole.ADMIN)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=AdminDashboard)
async def dashboard(users: UserService = Depends(get_users)) -> AdminDashboard:
    """Pending accounts and the full user list."""
    pending, everyone = await asyncio.gather(users.inactive(), users.list_all())
    return AdminDashboard(pending=pending, users=everyone)


@router.post("/users/{user_id}/activate", response_model=ActionResult[UserSchema])
async def activate_user(
    user_id: str, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    user = await users.activate(user_id)
    return ActionResult(message="User activated", data=user)


@router.get("/curators", response_model=list[UserSchema])
async def list_curators(users: UserService = Depends(get_users)) -> list[UserSchema]:
    return await users.by_role(UserRole.CURATOR)


@router.post(
    "/curators",
    response_model=ActionResult[UserSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_curator(
    curator_data: UserCreate, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    """Create a curator account; curators created here are active at once."""
    curator_data = curator_data.model_copy(update={"role": UserRole.CURATOR})
    curator = await users.create_user(curator_data, active=True)
    return ActionResult(message="Curator created and activated", data=curator)


@router.post("/curators/{user_id}/activate", response_model=ActionResult[UserSchema])
async def activate_curator(
    user_id: str, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    curator = await users.activate(user_id)
    return ActionResult(message="Curator activated", data=curator)


@router.post("/curators/{user_id}/deactivate", response_model=ActionResult[UserSchema])
async def deactivate_curator(
    user_id: str, users: UserService = Depends(get_users)
) -> ActionResult[UserSchema]:
    curator = await users.deactivate(user_id)
    return ActionResult(message="Curator deactivated", data=curator)
