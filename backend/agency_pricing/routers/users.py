"""Users API - account creation, role assignment and deletion."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.auth import UserCreate
from agency_pricing.schemas.user import UserListItem, UserRoleUpdate
from agency_pricing.services import user_service
from agency_pricing.services.auth_service import create_user
from agency_pricing.services.usage_service import USER_CHANGED, track_usage

router = APIRouter(prefix="/users", tags=["users"])

CanManage = Annotated[RoleCapabilities, Depends(require_capability(Capability.MANAGE_USERS))]


@router.get("", response_model=list[UserListItem])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: CanManage,
):
    return unwrap(await user_service.list_users(db))


@router.post("", response_model=UserListItem, status_code=201)
async def create_account(
    data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanManage,
):
    created = unwrap(await create_user(db, data))
    await track_usage(db, user.id, USER_CHANGED, {"op": "create", "id": created.id, "role": data.role.value})
    return user_service.to_list_item(created)


@router.patch("/{user_id}/role", response_model=UserListItem)
async def change_role(
    user_id: int,
    data: UserRoleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanManage,
):
    updated = unwrap(await user_service.update_role(db, user_id, data))
    await track_usage(
        db,
        user.id,
        USER_CHANGED,
        {"op": "role", "id": user_id, "role": updated.role.value, "custom_role_id": updated.custom_role_id},
    )
    return updated


@router.delete("/{user_id}", status_code=204)
async def delete_account(
    user_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: Annotated[RoleCapabilities, Depends(require_capability(Capability.DELETE_USERS))],
):
    unwrap(await user_service.delete_user(db, user_id, acting_user_id=user.id))
    await track_usage(db, user.id, USER_CHANGED, {"op": "delete", "id": user_id})
    return None
