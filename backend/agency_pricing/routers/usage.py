"""Usage history API."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.engine.periods import DateRange, PeriodKind, period_bounds
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.usage import UsageEventResponse
from agency_pricing.services.usage_service import list_usage

router = APIRouter(prefix="/usage-history", tags=["usage"])


@router.get("", response_model=list[UsageEventResponse])
async def get_usage_history(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[RoleCapabilities, Depends(require_capability(Capability.VIEW_USAGE_HISTORY))],
    user_id: int | None = Query(None),
    action: str | None = Query(None),
    period: PeriodKind = Query(PeriodKind.ALL),
    start: date | None = Query(None),
    end: date | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
):
    bounds = period_bounds(period, DateRange(start, end))
    return unwrap(
        await list_usage(
            db,
            user_id=user_id,
            action=action,
            start=bounds[0] if bounds else None,
            end=bounds[1] if bounds else None,
            limit=limit,
        )
    )
