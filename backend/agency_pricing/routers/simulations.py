"""Simulations API - save priced simulations and browse the history."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, get_role_capabilities, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.engine.periods import DateRange, PeriodKind, period_bounds
from agency_pricing.models.user import User
from agency_pricing.routers.common import load_engine, unwrap
from agency_pricing.schemas.simulation import SimulationCommitResponse, SimulationCreate, SimulationResponse
from agency_pricing.services.catalog_service import ClientTypeCatalog, MarginCatalog, ProjectTypeCatalog
from agency_pricing.services.simulation_service import (
    CommitStatus,
    SimulationFilter,
    SimulationWorkflow,
    SqlSimulationStore,
)
from agency_pricing.services.usage_service import SIMULATION_CREATED, track_usage

router = APIRouter(prefix="/simulations", tags=["simulations"])


def scope_for(user: User, role: RoleCapabilities) -> SimulationFilter:
    return SimulationFilter(author_id=user.id, is_admin=role.has_capability(Capability.VIEW_ALL_SIMULATIONS))


@router.post("", response_model=SimulationCommitResponse, status_code=201)
async def create_simulation(
    data: SimulationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: Annotated[RoleCapabilities, Depends(require_capability(Capability.CREATE_SIMULATIONS))],
):
    workflow = SimulationWorkflow(
        store=SqlSimulationStore(db),
        engine=await load_engine(db),
        client_types=unwrap(await ClientTypeCatalog(db).list()),
        project_types=unwrap(await ProjectTypeCatalog(db).list_active()),
        margins=unwrap(await MarginCatalog(db).list_active()),
    )
    outcome = await workflow.commit(data, author_id=user.id, author_display_name=user.full_name)

    if outcome.status == CommitStatus.REJECTED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=outcome.errors)
    if outcome.status == CommitStatus.FAILED:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=outcome.errors)

    await track_usage(
        db,
        user.id,
        SIMULATION_CREATED,
        {"simulation_id": outcome.simulation.id, "client_name": outcome.simulation.client_name},
    )
    return SimulationCommitResponse(simulation=outcome.simulation, justification=outcome.justification)


@router.get("", response_model=list[SimulationResponse])
async def list_simulations(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    role: Annotated[RoleCapabilities, Depends(get_role_capabilities)],
    period: PeriodKind = Query(PeriodKind.ALL),
    start: date | None = Query(None),
    end: date | None = Query(None),
    client_type_id: int | None = Query(None),
    search: str | None = Query(None, max_length=200),
):
    scope = scope_for(user, role)
    bounds = period_bounds(period, DateRange(start, end))
    filters = SimulationFilter(
        author_id=scope.author_id,
        is_admin=scope.is_admin,
        start=bounds[0] if bounds else None,
        end=bounds[1] if bounds else None,
        client_type_id=client_type_id,
        search=search,
    )
    return unwrap(await SqlSimulationStore(db).list(filters))


@router.get("/{simulation_id}", response_model=SimulationResponse)
async def get_simulation(
    simulation_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    role: Annotated[RoleCapabilities, Depends(get_role_capabilities)],
):
    return unwrap(await SqlSimulationStore(db).get(simulation_id, scope_for(user, role)))
