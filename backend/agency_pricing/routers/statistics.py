"""Statistics API."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.config import get_settings
from agency_pricing.database import get_db
from agency_pricing.engine.periods import DateRange, PeriodKind
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.statistics import StatisticsResponse
from agency_pricing.services.simulation_service import SimulationFilter, SqlSimulationStore
from agency_pricing.services.statistics_service import build_statistics

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("", response_model=StatisticsResponse)
async def get_statistics(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    role: Annotated[RoleCapabilities, Depends(require_capability(Capability.VIEW_ANALYTICS))],
    period: PeriodKind = Query(PeriodKind.ALL),
    start: date | None = Query(None),
    end: date | None = Query(None),
):
    filters = SimulationFilter(author_id=user.id, is_admin=role.has_capability(Capability.VIEW_ALL_SIMULATIONS))
    simulations = unwrap(await SqlSimulationStore(db).list(filters))
    return build_statistics(
        simulations,
        period,
        DateRange(start, end),
        default_months=get_settings().default_statistics_months,
    )
