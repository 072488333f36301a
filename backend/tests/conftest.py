"""Shared fixtures: catalog snapshots, an engine, an in-memory simulation store and a fake db session."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from agency_pricing.engine.calculator import PricingEngine
from agency_pricing.schemas.client_type import ClientTypeResponse
from agency_pricing.schemas.daily_rate import DailyRateResponse
from agency_pricing.schemas.margin import MarginResponse
from agency_pricing.schemas.project_type import ProjectTypeResponse
from agency_pricing.schemas.simulation import SimulationRecordInput, SimulationResponse
from agency_pricing.services.result import PersistenceError, Result

DEV_ID = 1
DESIGN_ID = 2
LEGACY_ID = 3


@pytest.fixture
def rates():
    return [
        DailyRateResponse(id=DEV_ID, role_name="Dev", daily_rate=Decimal("350000"), hourly_rate=Decimal("43750"), is_active=True),
        DailyRateResponse(id=DESIGN_ID, role_name="Designer", daily_rate=Decimal("200000"), hourly_rate=Decimal("25000"), is_active=True),
        DailyRateResponse(id=LEGACY_ID, role_name="Legacy", daily_rate=Decimal("999999"), hourly_rate=Decimal("125000"), is_active=False),
    ]


@pytest.fixture
def engine(rates):
    return PricingEngine(rates, hours_per_day=8)


@pytest.fixture
def client_types():
    return [
        ClientTypeResponse(id=1, name="Grand compte", coefficient=Decimal("1.2"), description="Premium"),
        ClientTypeResponse(id=2, name="Standard", coefficient=Decimal("1"), description=""),
        ClientTypeResponse(id=3, name="Association", coefficient=Decimal("0.85"), description="Tarif solidaire"),
    ]


@pytest.fixture
def project_types():
    return [
        ProjectTypeResponse(id=1, name="Site vitrine", description="", complexity_level="low"),
        ProjectTypeResponse(id=2, name="Application mobile", description="", complexity_level="high"),
    ]


@pytest.fixture
def margins():
    return [
        MarginResponse(id=1, percentage=30, is_active=True),
        MarginResponse(id=2, percentage=40, is_active=True),
        MarginResponse(id=3, percentage=60, is_active=False),
    ]


class FakeSimulationStore:
    """In-memory store; set `fail` to make create() report a persistence error."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.created: list[SimulationRecordInput] = []
        self.records: list[SimulationResponse] = []

    async def create(self, data: SimulationRecordInput) -> Result[SimulationResponse]:
        self.created.append(data)
        if self.fail:
            return Result.failure(PersistenceError("Could not save simulation"))
        record = SimulationResponse(
            id=len(self.records) + 1,
            client_name=data.client_name,
            client_type=data.client_type,
            project_type=data.project_type,
            work_line_items=data.work_line_items,
            margin_percentage=data.margin_percentage,
            internal_cost=data.internal_cost,
            cost_after_coefficient=data.cost_after_coefficient,
            recommended_price=data.recommended_price,
            author_id=data.author_id,
            author_display_name=data.author_display_name,
            created_at=datetime.now(timezone.utc),
        )
        self.records.append(record)
        return Result.success(record)

    async def list(self, filters) -> Result[list[SimulationResponse]]:
        if self.fail:
            return Result.failure(PersistenceError("Could not load simulations"))
        return Result.success(list(reversed(self.records)))


@pytest.fixture
def store():
    return FakeSimulationStore()


@pytest.fixture
def failing_store():
    return FakeSimulationStore(fail=True)


class FakeResult:
    def __init__(self, rows) -> None:
        self.rows = list(rows)

    def scalars(self):
        return self

    def all(self):
        return list(self.rows)

    def first(self):
        return self.rows[0] if self.rows else None

    def scalar_one_or_none(self):
        return self.rows[0] if self.rows else None

    def scalar_one(self):
        return self.rows[0] if self.rows else 0


class FakeSession:
    """AsyncSession stand-in.

    Every executed statement is kept in `executed`. Each execute() answers
    with the next entry of `results` (empty once they run out); get() looks
    up `objects` by (model, id).
    """

    def __init__(self, results=None, objects=None, fail: bool = False) -> None:
        self.results = list(results or [])
        self.objects = dict(objects or {})
        self.fail = fail
        self.executed = []
        self.added = []
        self.deleted = []
        self.rolled_back = False

    async def execute(self, statement):
        self.executed.append(statement)
        if self.fail:
            raise OperationalError("SELECT", {}, Exception("database unavailable"))
        return FakeResult(self.results.pop(0) if self.results else [])

    async def get(self, model, ident):
        return self.objects.get((model, ident))

    def add(self, obj) -> None:
        self.added.append(obj)

    async def flush(self) -> None:
        pass

    async def refresh(self, obj, attribute_names=None) -> None:
        pass

    async def delete(self, obj) -> None:
        self.deleted.append(obj)

    async def rollback(self) -> None:
        self.rolled_back = True

    async def commit(self) -> None:
        pass

    @asynccontextmanager
    async def begin_nested(self):
        yield self


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def make_session():
    return FakeSession
