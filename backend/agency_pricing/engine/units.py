"""Day/hour unit helpers shared by the engine and the justification text."""
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from agency_pricing.schemas.calculation import CalculationMode

HOURS_PER_DAY = 8


def as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


CENT = Decimal("0.01")


def derive_hourly_rate(daily_rate: Decimal, hours_per_day: int = HOURS_PER_DAY) -> Decimal:
    """Conventional hourly rate: daily / hours_per_day, rounded half up to a whole unit.

    Rates too small to reach one whole unit per hour are kept to the cent,
    and never below one cent, so a positive daily rate always gives a
    positive hourly rate.
    """
    exact = as_decimal(daily_rate) / Decimal(hours_per_day)
    hourly = exact.quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if hourly > 0:
        return hourly
    return max(exact.quantize(CENT, rounding=ROUND_HALF_UP), CENT)


def to_days(units: Decimal, mode: CalculationMode, hours_per_day: int = HOURS_PER_DAY) -> Decimal:
    units = as_decimal(units)
    if mode == CalculationMode.HOURLY:
        return units / Decimal(hours_per_day)
    return units


def convert_units(
    units_by_role_id: Mapping[int, Decimal],
    from_mode: CalculationMode,
    to_mode: CalculationMode,
    hours_per_day: int = HOURS_PER_DAY,
) -> dict[int, Decimal]:
    """Convert every non-zero quantity between days and hours. Exact, never truncated."""
    if from_mode == to_mode:
        return {role_id: as_decimal(units) for role_id, units in units_by_role_id.items()}
    factor = Decimal(hours_per_day)
    converted: dict[int, Decimal] = {}
    for role_id, units in units_by_role_id.items():
        units = as_decimal(units)
        if units == 0:
            converted[role_id] = units
        elif to_mode == CalculationMode.HOURLY:
            converted[role_id] = units * factor
        else:
            converted[role_id] = units / factor
    return converted
