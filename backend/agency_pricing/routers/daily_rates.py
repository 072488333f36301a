"""Daily rates API - cost per role, per day and per hour."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.daily_rate import DailyRateCreate, DailyRateResponse, DailyRateUpdate
from agency_pricing.services.catalog_service import DailyRateCatalog
from agency_pricing.services.usage_service import CATALOG_CHANGED, track_usage

router = APIRouter(prefix="/settings", tags=["daily-rates"])

CanEdit = Annotated[RoleCapabilities, Depends(require_capability(Capability.EDIT_DAILY_RATES))]


@router.get("/daily-rates", response_model=list[DailyRateResponse])
async def list_daily_rates(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    active_only: bool = Query(False),
):
    catalog = DailyRateCatalog(db)
    return unwrap(await (catalog.list_active() if active_only else catalog.list()))


@router.post("/daily-rates", response_model=DailyRateResponse)
async def create_daily_rate(
    data: DailyRateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    rate = unwrap(await DailyRateCatalog(db).create(data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "daily_rates", "op": "create", "id": rate.id})
    return rate


@router.patch("/daily-rates/{rate_id}", response_model=DailyRateResponse)
async def update_daily_rate(
    rate_id: int,
    data: DailyRateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    rate = unwrap(await DailyRateCatalog(db).update(rate_id, data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "daily_rates", "op": "update", "id": rate_id})
    return rate


@router.delete("/daily-rates/{rate_id}", status_code=204)
async def delete_daily_rate(
    rate_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    unwrap(await DailyRateCatalog(db).delete(rate_id))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "daily_rates", "op": "delete", "id": rate_id})
    return None
