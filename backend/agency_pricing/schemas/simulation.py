"""Simulation schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from agency_pricing.schemas.calculation import CalculationMode, non_negative_units
from agency_pricing.schemas.project_type import ComplexityLiteral


class ClientTypeSnapshot(BaseModel):
    """Copy of a client type taken when the simulation is saved."""

    id: int
    name: str
    coefficient: Decimal
    description: str = ""

    class Config:
        from_attributes = True


class ProjectTypeSnapshot(BaseModel):
    id: int
    name: str
    description: str = ""
    complexity_level: ComplexityLiteral

    @field_validator("complexity_level", mode="before")
    @classmethod
    def enum_to_value(cls, v):
        return v.value if hasattr(v, "value") else v

    class Config:
        from_attributes = True


class WorkLineItem(BaseModel):
    """One role's work on a simulation. Stored in days."""

    role_id: int
    role_name: str
    units_consumed: Decimal = Field(..., ge=0)
    # Per-day equivalent of the rate applied, so units_consumed * unit_rate_used == line cost
    unit_rate_used: Decimal

    @property
    def line_cost(self) -> Decimal:
        return self.units_consumed * self.unit_rate_used


class SimulationCreate(BaseModel):
    """Calculator form as submitted. Completeness is checked by the commit workflow."""

    client_name: str = ""
    client_type_id: int | None = None
    project_type_id: int | None = None
    margin_percentage: int | None = None
    units_by_role_id: dict[int, Decimal] = Field(default_factory=dict)
    mode: CalculationMode = CalculationMode.DAILY

    @field_validator("units_by_role_id")
    @classmethod
    def check_units(cls, v: dict[int, Decimal]) -> dict[int, Decimal]:
        return non_negative_units(v)


class SimulationRecordInput(BaseModel):
    """What the workflow hands to the simulation store."""

    client_name: str
    client_type: ClientTypeSnapshot
    project_type: ProjectTypeSnapshot
    work_line_items: list[WorkLineItem]
    margin_percentage: Decimal
    internal_cost: Decimal
    cost_after_coefficient: Decimal
    recommended_price: Decimal
    author_id: int
    author_display_name: str


class SimulationResponse(BaseModel):
    id: int
    client_name: str
    client_type: ClientTypeSnapshot
    project_type: ProjectTypeSnapshot
    work_line_items: list[WorkLineItem]
    margin_percentage: Decimal
    internal_cost: Decimal
    cost_after_coefficient: Decimal
    recommended_price: Decimal
    author_id: int | None
    author_display_name: str
    created_at: datetime


class SimulationCommitResponse(BaseModel):
    simulation: SimulationResponse
    justification: list[str] | None = None
