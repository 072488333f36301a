"""Margins API - selectable margin percentages."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.margin import MarginCreate, MarginResponse, MarginUpdate
from agency_pricing.services.catalog_service import MarginCatalog
from agency_pricing.services.usage_service import CATALOG_CHANGED, track_usage

router = APIRouter(prefix="/settings", tags=["margins"])

CanEdit = Annotated[RoleCapabilities, Depends(require_capability(Capability.EDIT_MARGINS))]


@router.get("/margins", response_model=list[MarginResponse])
async def list_margins(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    active_only: bool = Query(False),
):
    catalog = MarginCatalog(db)
    return unwrap(await (catalog.list_active() if active_only else catalog.list()))


@router.post("/margins", response_model=MarginResponse)
async def create_margin(
    data: MarginCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    margin = unwrap(await MarginCatalog(db).create(data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "margins", "op": "create", "id": margin.id})
    return margin


@router.patch("/margins/{margin_id}", response_model=MarginResponse)
async def update_margin(
    margin_id: int,
    data: MarginUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    margin = unwrap(await MarginCatalog(db).update(margin_id, data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "margins", "op": "update", "id": margin_id})
    return margin


@router.delete("/margins/{margin_id}", status_code=204)
async def delete_margin(
    margin_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    unwrap(await MarginCatalog(db).delete(margin_id))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "margins", "op": "delete", "id": margin_id})
    return None
