"""
User CRUD endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.db import RowId
from core.responses import APIResponse, ok

from . import schemas
from .dependencies import get_user_repository
from .repository import UserRepository

router = APIRouter()


@router.post("/users")
async def create_user(
    payload: schemas.UserCreate,
    users: UserRepository = Depends(get_user_repository),
) -> APIResponse[schemas.User]:
    user = await users.create(payload)
    return ok("user created", user)


@router.get("/users")
async def list_users(
    users: UserRepository = Depends(get_user_repository),
) -> APIResponse[list[schemas.User]]:
    return ok("query succeeded", await users.list_all())


@router.get("/users/{user_id}")
async def get_user(
    user_id: RowId,
    users: UserRepository = Depends(get_user_repository),
) -> APIResponse[schemas.User]:
    return ok("query succeeded", await users.get(user_id))


@router.put("/users/{user_id}")
async def update_user(
    user_id: RowId,
    patch: schemas.UserUpdate,
    users: UserRepository = Depends(get_user_repository),
) -> APIResponse[schemas.User]:
    """
    Merge the supplied fields onto the stored user.

    The body is bound before the lookup, so a malformed body is a 400 even
    when the user does not exist.
    """
    user = await users.update(user_id, patch)
    return ok("user updated", user)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: RowId,
    users: UserRepository = Depends(get_user_repository),
) -> APIResponse:
    await users.delete(user_id)
    return ok("user deleted")
