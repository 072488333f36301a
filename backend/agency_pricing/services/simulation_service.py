"""Simulation storage and the save workflow."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.engine.calculator import PricingEngine
from agency_pricing.models.simulation import Simulation
from agency_pricing.schemas.calculation import CostResult
from agency_pricing.schemas.simulation import (
    ClientTypeSnapshot,
    ProjectTypeSnapshot,
    SimulationCreate,
    SimulationRecordInput,
    SimulationResponse,
    WorkLineItem,
)
from agency_pricing.services.result import NotFoundError, PersistenceError, Result, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationFilter:
    author_id: int | None = None
    is_admin: bool = False
    start: datetime | None = None
    end: datetime | None = None
    client_type_id: int | None = None
    search: str | None = None


class SimulationStore(Protocol):
    async def create(self, data: SimulationRecordInput) -> Result[SimulationResponse]: ...

    async def list(self, filters: SimulationFilter) -> Result[list[SimulationResponse]]: ...


def row_to_simulation(row: Simulation) -> SimulationResponse:
    return SimulationResponse(
        id=row.id,
        client_name=row.client_name,
        client_type=ClientTypeSnapshot.model_validate(row.client_type),
        project_type=ProjectTypeSnapshot.model_validate(row.project_type),
        work_line_items=[WorkLineItem.model_validate(item) for item in row.role_days or []],
        margin_percentage=row.margin,
        internal_cost=row.internal_cost,
        cost_after_coefficient=row.cost_after_coefficient,
        recommended_price=row.recommended_price,
        author_id=row.created_by,
        author_display_name=row.created_by_name or "Utilisateur inconnu",
        created_at=row.created_at,
    )


def matches_search(simulation: SimulationResponse, query: str) -> bool:
    """Case-insensitive match on client name or project type name."""
    q = query.strip().lower()
    if not q:
        return True
    return q in simulation.client_name.lower() or q in simulation.project_type.name.lower()


class SqlSimulationStore:
    """Simulations in PostgreSQL. Non-admin readers only see their own records."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, data: SimulationRecordInput) -> Result[SimulationResponse]:
        row = Simulation(
            client_name=data.client_name.strip(),
            client_type=data.client_type.model_dump(mode="json"),
            project_type=data.project_type.model_dump(mode="json"),
            role_days=[item.model_dump(mode="json") for item in data.work_line_items],
            margin=data.margin_percentage,
            internal_cost=data.internal_cost,
            cost_after_coefficient=data.cost_after_coefficient,
            recommended_price=data.recommended_price,
            created_by=data.author_id,
            created_by_name=data.author_display_name,
        )
        try:
            self.db.add(row)
            await self.db.flush()
            await self.db.refresh(row)
        except SQLAlchemyError as exc:
            logger.error("Failed to store simulation for %r: %s", data.client_name, exc)
            await self.db.rollback()
            return Result.failure(PersistenceError("Could not save simulation"))
        logger.info("Stored simulation %s for %r", row.id, row.client_name)
        return Result.success(row_to_simulation(row))

    def _scoped(self, query, filters: SimulationFilter):
        if not filters.is_admin:
            query = query.where(Simulation.created_by == filters.author_id)
        return query

    async def list(self, filters: SimulationFilter) -> Result[list[SimulationResponse]]:
        if not filters.is_admin and filters.author_id is None:
            return Result.success([])
        query = self._scoped(select(Simulation), filters).order_by(Simulation.created_at.desc())
        if filters.start is not None:
            query = query.where(Simulation.created_at >= filters.start)
        if filters.end is not None:
            query = query.where(Simulation.created_at <= filters.end)
        if filters.client_type_id is not None:
            query = query.where(Simulation.client_type.contains({"id": filters.client_type_id}))
        try:
            result = await self.db.execute(query)
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Failed to list simulations: %s", exc)
            return Result.failure(PersistenceError("Could not load simulations"))

        simulations = [row_to_simulation(r) for r in rows]
        if filters.search:
            simulations = [s for s in simulations if matches_search(s, filters.search)]
        return Result.success(simulations)

    async def get(self, simulation_id: int, filters: SimulationFilter) -> Result[SimulationResponse]:
        query = self._scoped(select(Simulation).where(Simulation.id == simulation_id), filters)
        try:
            row = (await self.db.execute(query)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("Failed to load simulation %s: %s", simulation_id, exc)
            return Result.failure(PersistenceError("Could not load simulation"))
        if row is None:
            return Result.failure(NotFoundError("Simulation not found"))
        return Result.success(row_to_simulation(row))


class CommitStatus(str, Enum):
    SAVED = "saved"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class CommitOutcome:
    status: CommitStatus
    simulation: SimulationResponse | None = None
    result: CostResult | None = None
    justification: list[str] | None = None
    errors: list[str] = field(default_factory=list)
    error: StoreError | None = None

    @property
    def saved(self) -> bool:
        return self.status == CommitStatus.SAVED


class SimulationWorkflow:
    """Validate, price, snapshot and persist a calculator draft.

    history only ever holds records confirmed by the store, newest first.
    The draft is never modified, so a rejected or failed commit leaves the
    caller's form as it was.
    """

    def __init__(
        self,
        store: SimulationStore,
        engine: PricingEngine,
        client_types: Iterable,
        project_types: Iterable,
        margins: Iterable,
        history: list[SimulationResponse] | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.client_types = {c.id: c for c in client_types}
        self.project_types = {p.id: p for p in project_types}
        self.margin_options = {m.percentage for m in margins if m.is_active}
        self.history: list[SimulationResponse] = list(history or [])

    def validate(self, draft: SimulationCreate, result: CostResult) -> list[str]:
        errors = []
        if not draft.client_name.strip():
            errors.append("Client name is required")
        if draft.client_type_id is None:
            errors.append("Select a client type")
        elif draft.client_type_id not in self.client_types:
            errors.append("Unknown client type")
        if draft.project_type_id is None:
            errors.append("Select a project type")
        elif draft.project_type_id not in self.project_types:
            errors.append("Unknown project type")
        if draft.margin_percentage is None:
            errors.append("Select a margin")
        elif draft.margin_percentage not in self.margin_options:
            errors.append(f"Margin {draft.margin_percentage}% is not available")
        if result.internal_cost <= 0:
            errors.append("Enter at least one unit of work")
        return errors

    def price(self, draft: SimulationCreate) -> CostResult:
        return self.engine.compute_cost(
            draft.units_by_role_id,
            draft.mode,
            client_type=self.client_types.get(draft.client_type_id),
            margin_percentage=draft.margin_percentage,
        )

    async def commit(self, draft: SimulationCreate, author_id: int, author_display_name: str) -> CommitOutcome:
        result = self.price(draft)
        errors = self.validate(draft, result)
        if errors:
            return CommitOutcome(status=CommitStatus.REJECTED, result=result, errors=errors)

        client_type = self.client_types[draft.client_type_id]
        project_type = self.project_types[draft.project_type_id]
        record = SimulationRecordInput(
            client_name=draft.client_name.strip(),
            client_type=ClientTypeSnapshot.model_validate(client_type, from_attributes=True),
            project_type=ProjectTypeSnapshot.model_validate(project_type, from_attributes=True),
            work_line_items=self.engine.work_line_items(draft.units_by_role_id, draft.mode),
            margin_percentage=Decimal(draft.margin_percentage),
            internal_cost=result.internal_cost,
            cost_after_coefficient=result.cost_after_coefficient,
            recommended_price=result.recommended_price,
            author_id=author_id,
            author_display_name=author_display_name,
        )

        stored = await self.store.create(record)
        if stored.error is not None or stored.data is None:
            error = stored.error or PersistenceError("Store returned no record")
            logger.warning("Simulation for %r not saved: %s", record.client_name, error)
            return CommitOutcome(status=CommitStatus.FAILED, result=result, errors=[str(error)], error=error)

        self.history.insert(0, stored.data)
        justification = self.engine.generate_justification(
            result,
            draft.units_by_role_id,
            draft.mode,
            client_type=client_type,
            project_type=project_type,
        )
        return CommitOutcome(
            status=CommitStatus.SAVED,
            simulation=stored.data,
            result=result,
            justification=justification,
        )

    async def load_history(self, filters: SimulationFilter) -> Result[list[SimulationResponse]]:
        """Replace history with the store's view; on failure the current history is kept."""
        loaded = await self.store.list(filters)
        if loaded.error is None and loaded.data is not None:
            self.history = list(loaded.data)
        return loaded
