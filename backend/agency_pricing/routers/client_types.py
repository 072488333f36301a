"""Client types API - pricing coefficient per client category."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.client_type import ClientTypeCreate, ClientTypeResponse, ClientTypeUpdate
from agency_pricing.services.catalog_service import ClientTypeCatalog
from agency_pricing.services.usage_service import CATALOG_CHANGED, track_usage

router = APIRouter(prefix="/settings", tags=["client-types"])

CanEdit = Annotated[RoleCapabilities, Depends(require_capability(Capability.EDIT_CLIENT_TYPES))]


@router.get("/client-types", response_model=list[ClientTypeResponse])
async def list_client_types(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    return unwrap(await ClientTypeCatalog(db).list())


@router.post("/client-types", response_model=ClientTypeResponse)
async def create_client_type(
    data: ClientTypeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    client_type = unwrap(await ClientTypeCatalog(db).create(data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "client_types", "op": "create", "id": client_type.id})
    return client_type


@router.patch("/client-types/{client_type_id}", response_model=ClientTypeResponse)
async def update_client_type(
    client_type_id: int,
    data: ClientTypeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    client_type = unwrap(await ClientTypeCatalog(db).update(client_type_id, data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "client_types", "op": "update", "id": client_type_id})
    return client_type


@router.delete("/client-types/{client_type_id}", status_code=204)
async def delete_client_type(
    client_type_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    unwrap(await ClientTypeCatalog(db).delete(client_type_id))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "client_types", "op": "delete", "id": client_type_id})
    return None
