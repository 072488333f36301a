"""Calculation request/result schemas."""
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class CalculationMode(str, Enum):
    """Unit in which work quantities are entered."""

    DAILY = "daily"
    HOURLY = "hourly"


def non_negative_units(v: dict[int, Decimal]) -> dict[int, Decimal]:
    for role_id, units in v.items():
        if units < 0:
            raise ValueError(f"Units for role {role_id} must be >= 0")
    return v


class CostResult(BaseModel):
    internal_cost: Decimal
    coefficient: Decimal
    cost_after_coefficient: Decimal
    margin_percentage: Decimal
    recommended_price: Decimal
    total_units: Decimal

    @property
    def margin_amount(self) -> Decimal:
        return self.recommended_price - self.cost_after_coefficient


class CalculationRequest(BaseModel):
    units_by_role_id: dict[int, Decimal] = Field(default_factory=dict)
    mode: CalculationMode = CalculationMode.DAILY
    client_type_id: int | None = None
    project_type_id: int | None = None
    margin_percentage: int | None = Field(None, gt=0, le=100)

    @field_validator("units_by_role_id")
    @classmethod
    def check_units(cls, v: dict[int, Decimal]) -> dict[int, Decimal]:
        return non_negative_units(v)


class CalculationPreview(BaseModel):
    mode: CalculationMode
    result: CostResult
    # None until some work has been entered
    justification: list[str] | None


class UnitConversionRequest(BaseModel):
    units_by_role_id: dict[int, Decimal]
    from_mode: CalculationMode
    to_mode: CalculationMode

    @field_validator("units_by_role_id")
    @classmethod
    def check_units(cls, v: dict[int, Decimal]) -> dict[int, Decimal]:
        return non_negative_units(v)


class UnitConversionResponse(BaseModel):
    mode: CalculationMode
    units_by_role_id: dict[int, Decimal]
