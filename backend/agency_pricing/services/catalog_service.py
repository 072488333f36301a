"""Pricing catalogs: daily rates, client types, margins, project types.

Every operation returns a Result; database errors are captured and
reported, never raised to the caller.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.config import get_settings
from agency_pricing.database import Base
from agency_pricing.engine.units import derive_hourly_rate
from agency_pricing.models.client_type import ClientType
from agency_pricing.models.daily_rate import DailyRate
from agency_pricing.models.margin import Margin
from agency_pricing.models.project_type import ComplexityLevel, ProjectType
from agency_pricing.schemas.client_type import ClientTypeResponse
from agency_pricing.schemas.daily_rate import DailyRateResponse
from agency_pricing.schemas.margin import MarginResponse
from agency_pricing.schemas.project_type import ProjectTypeResponse
from agency_pricing.services.result import DuplicateError, NotFoundError, PersistenceError, Result

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
ResponseT = TypeVar("ResponseT", bound=BaseModel)


class MarginLike(Protocol):
    id: int
    percentage: int


def find_duplicate_margin(
    existing: Iterable[MarginLike],
    percentage: int,
    exclude_id: int | None = None,
) -> MarginLike | None:
    """Stored margin already using this percentage, ignoring the record being edited."""
    for margin in existing:
        if margin.percentage == percentage and margin.id != exclude_id:
            return margin
    return None


def resolve_rate_fields(
    changes: dict[str, Any],
    hours_per_day: int,
    current_daily: Decimal | None = None,
) -> dict[str, Any]:
    """Apply the daily/hourly sync policy to a create or update payload.

    An explicit hourly_rate is kept as given. Otherwise, whenever daily_rate
    is set (or on create), hourly_rate is derived from it.
    """
    changes = dict(changes)
    if changes.get("hourly_rate") is not None:
        return changes
    changes.pop("hourly_rate", None)
    daily = changes.get("daily_rate")
    if daily is not None and daily != current_daily:
        changes["hourly_rate"] = derive_hourly_rate(daily, hours_per_day)
    return changes


class SqlCatalog(Generic[ModelT, ResponseT]):
    model: type[ModelT]
    response: type[ResponseT]
    entity: str = "record"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _order_by(self):
        return self.model.id

    def _to_response(self, row: ModelT) -> ResponseT:
        return self.response.model_validate(row)

    async def _failed(self, action: str, exc: SQLAlchemyError) -> Result:
        logger.error("Failed to %s %s: %s", action, self.entity, exc)
        await self.db.rollback()
        return Result.failure(PersistenceError(f"Could not {action} {self.entity}"))

    async def _rows(self, *criteria) -> list[ModelT]:
        result = await self.db.execute(select(self.model).where(*criteria).order_by(self._order_by()))
        return list(result.scalars().all())

    async def list(self) -> Result[list[ResponseT]]:
        try:
            rows = await self._rows()
        except SQLAlchemyError as exc:
            return await self._failed("list", exc)
        return Result.success([self._to_response(r) for r in rows])

    async def get(self, record_id: int) -> Result[ResponseT]:
        try:
            row = await self.db.get(self.model, record_id)
        except SQLAlchemyError as exc:
            return await self._failed("load", exc)
        if row is None:
            return Result.failure(NotFoundError(f"{self.entity.capitalize()} not found"))
        return Result.success(self._to_response(row))

    async def _check(self, values: dict[str, Any], record_id: int | None = None) -> DuplicateError | None:
        return None

    def _prepare(self, values: dict[str, Any], row: ModelT | None = None) -> dict[str, Any]:
        return values

    async def create(self, data: BaseModel) -> Result[ResponseT]:
        values = self._prepare(data.model_dump())
        try:
            duplicate = await self._check(values)
            if duplicate:
                return Result.failure(duplicate)
            row = self.model(**values)
            self.db.add(row)
            await self.db.flush()
            await self.db.refresh(row)
        except SQLAlchemyError as exc:
            return await self._failed("create", exc)
        logger.info("Created %s %s", self.entity, row.id)
        return Result.success(self._to_response(row))

    async def update(self, record_id: int, data: BaseModel) -> Result[ResponseT]:
        try:
            row = await self.db.get(self.model, record_id)
            if row is None:
                return Result.failure(NotFoundError(f"{self.entity.capitalize()} not found"))
            values = self._prepare(data.model_dump(exclude_unset=True), row)
            duplicate = await self._check(values, record_id)
            if duplicate:
                return Result.failure(duplicate)
            for k, v in values.items():
                setattr(row, k, v)
            await self.db.flush()
            await self.db.refresh(row)
        except SQLAlchemyError as exc:
            return await self._failed("update", exc)
        return Result.success(self._to_response(row))

    async def delete(self, record_id: int) -> Result[None]:
        try:
            row = await self.db.get(self.model, record_id)
            if row is None:
                return Result.failure(NotFoundError(f"{self.entity.capitalize()} not found"))
            await self.db.delete(row)
            await self.db.flush()
        except SQLAlchemyError as exc:
            return await self._failed("delete", exc)
        logger.info("Deleted %s %s", self.entity, record_id)
        return Result.success(None)


class DailyRateCatalog(SqlCatalog[DailyRate, DailyRateResponse]):
    model = DailyRate
    response = DailyRateResponse
    entity = "daily rate"

    def _order_by(self):
        return DailyRate.role_name

    def _prepare(self, values: dict[str, Any], row: DailyRate | None = None) -> dict[str, Any]:
        hours_per_day = get_settings().hours_per_day
        return resolve_rate_fields(values, hours_per_day, row.daily_rate if row is not None else None)

    async def _check(self, values: dict[str, Any], record_id: int | None = None) -> DuplicateError | None:
        name = values.get("role_name")
        if name is None:
            return None
        rows = await self._rows(DailyRate.role_name == name)
        if any(r.id != record_id for r in rows):
            return DuplicateError(f"Role '{name}' already has a rate")
        return None

    async def list_active(self) -> Result[list[DailyRateResponse]]:
        try:
            rows = await self._rows(DailyRate.is_active.is_(True))
        except SQLAlchemyError as exc:
            return await self._failed("list", exc)
        return Result.success([self._to_response(r) for r in rows])


class ClientTypeCatalog(SqlCatalog[ClientType, ClientTypeResponse]):
    model = ClientType
    response = ClientTypeResponse
    entity = "client type"

    def _order_by(self):
        return ClientType.name

    async def _check(self, values: dict[str, Any], record_id: int | None = None) -> DuplicateError | None:
        name = values.get("name")
        if name is None:
            return None
        rows = await self._rows(ClientType.name == name)
        if any(r.id != record_id for r in rows):
            return DuplicateError(f"Client type '{name}' already exists")
        return None


class MarginCatalog(SqlCatalog[Margin, MarginResponse]):
    model = Margin
    response = MarginResponse
    entity = "margin"

    def _order_by(self):
        return Margin.percentage

    async def _check(self, values: dict[str, Any], record_id: int | None = None) -> DuplicateError | None:
        percentage = values.get("percentage")
        if percentage is None:
            return None
        existing = await self._rows(Margin.percentage == percentage)
        if find_duplicate_margin(existing, percentage, exclude_id=record_id):
            return DuplicateError(f"A {percentage}% margin already exists")
        return None

    async def list_active(self) -> Result[list[MarginResponse]]:
        try:
            rows = await self._rows(Margin.is_active.is_(True))
        except SQLAlchemyError as exc:
            return await self._failed("list", exc)
        return Result.success([self._to_response(r) for r in rows])


class ProjectTypeCatalog(SqlCatalog[ProjectType, ProjectTypeResponse]):
    model = ProjectType
    response = ProjectTypeResponse
    entity = "project type"

    def _order_by(self):
        return ProjectType.name

    def _prepare(self, values: dict[str, Any], row: ProjectType | None = None) -> dict[str, Any]:
        if values.get("complexity_level") is not None:
            values["complexity_level"] = ComplexityLevel(values["complexity_level"])
        return values

    async def _check(self, values: dict[str, Any], record_id: int | None = None) -> DuplicateError | None:
        name = values.get("name")
        if name is None:
            return None
        rows = await self._rows(ProjectType.name == name)
        if any(r.id != record_id for r in rows):
            return DuplicateError(f"Project type '{name}' already exists")
        return None

    async def list_active(self) -> Result[list[ProjectTypeResponse]]:
        try:
            rows = await self._rows(ProjectType.is_active.is_(True))
        except SQLAlchemyError as exc:
            return await self._failed("list", exc)
        return Result.success([self._to_response(r) for r in rows])
