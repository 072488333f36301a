"""Roles API - custom roles and the caller's own capabilities."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, get_role_capabilities, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.role import (
    CustomRoleCreate,
    CustomRoleResponse,
    CustomRoleUpdate,
    RoleCapabilitiesResponse,
)
from agency_pricing.services.role_service import RoleService
from agency_pricing.services.usage_service import ROLE_CHANGED, track_usage

router = APIRouter(prefix="/roles", tags=["roles"])

CanManage = Annotated[RoleCapabilities, Depends(require_capability(Capability.MANAGE_ROLES))]


@router.get("/me", response_model=RoleCapabilitiesResponse)
async def my_role(role: Annotated[RoleCapabilities, Depends(get_role_capabilities)]):
    return RoleCapabilitiesResponse(
        role_id=role.role_id,
        role_name=role.role_name,
        permissions=dict(role.capabilities),
    )


@router.get("", response_model=list[CustomRoleResponse])
async def list_roles(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: CanManage,
):
    return unwrap(await RoleService(db).list())


@router.post("", response_model=CustomRoleResponse)
async def create_role(
    data: CustomRoleCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanManage,
):
    role = unwrap(await RoleService(db).create(data))
    await track_usage(db, user.id, ROLE_CHANGED, {"op": "create", "id": role.id, "name": role.name})
    return role


@router.patch("/{role_id}", response_model=CustomRoleResponse)
async def update_role(
    role_id: int,
    data: CustomRoleUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanManage,
):
    role = unwrap(await RoleService(db).update(role_id, data))
    await track_usage(db, user.id, ROLE_CHANGED, {"op": "update", "id": role_id})
    return role


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanManage,
):
    unwrap(await RoleService(db).delete(role_id))
    await track_usage(db, user.id, ROLE_CHANGED, {"op": "delete", "id": role_id})
    return None
