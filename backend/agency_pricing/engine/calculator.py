"""Centralized pricing engine - all formulas deterministic, Decimal only, no rounding."""
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Protocol

from agency_pricing.config import get_settings
from agency_pricing.engine.justification import ComplexityLabelled, NamedCoefficient, generate_justification
from agency_pricing.engine.units import HOURS_PER_DAY, as_decimal, convert_units, to_days
from agency_pricing.schemas.calculation import CalculationMode, CostResult
from agency_pricing.schemas.simulation import WorkLineItem


class RateLike(Protocol):
    id: int
    role_name: str
    daily_rate: Decimal
    hourly_rate: Decimal
    is_active: bool


class CoefficientLike(Protocol):
    coefficient: Decimal


class PricingEngine:
    """Turns role quantities, a client coefficient and a margin into a recommended price.

    Built from a snapshot of the rate catalog; inactive rates are dropped up
    front so no stale quantity can reach them.
    """

    def __init__(self, rates: Iterable[RateLike], hours_per_day: int | None = None) -> None:
        self.settings = get_settings()
        self.hours_per_day = hours_per_day or self.settings.hours_per_day or HOURS_PER_DAY
        self._rates = {r.id: r for r in rates if r.is_active}

    @property
    def active_rates(self) -> list[RateLike]:
        return list(self._rates.values())

    def unit_rate(self, rate: RateLike, mode: CalculationMode) -> Decimal:
        return as_decimal(rate.hourly_rate if mode == CalculationMode.HOURLY else rate.daily_rate)

    def _billable(self, units_by_role_id: Mapping[int, Decimal]) -> list[tuple[RateLike, Decimal]]:
        """Active rates with a positive quantity, in catalog order."""
        lines = []
        for role_id, rate in self._rates.items():
            units = as_decimal(units_by_role_id.get(role_id, 0) or 0)
            if units > 0:
                lines.append((rate, units))
        return lines

    def compute_cost(
        self,
        units_by_role_id: Mapping[int, Decimal],
        mode: CalculationMode = CalculationMode.DAILY,
        client_type: CoefficientLike | None = None,
        margin_percentage: Decimal | int | None = None,
    ) -> CostResult:
        """
        Internal cost = Σ units × (hourly or daily rate) over active rates.
        Cost after coefficient = internal cost × coefficient (1 when none selected).
        Recommended price = cost after coefficient × (1 + margin / 100) (margin 0 when none).
        """
        lines = self._billable(units_by_role_id)
        internal_cost = sum((units * self.unit_rate(rate, mode) for rate, units in lines), Decimal(0))
        total_units = sum((units for _, units in lines), Decimal(0))

        coefficient = as_decimal(client_type.coefficient) if client_type is not None else Decimal(1)
        cost_after_coefficient = internal_cost * coefficient

        margin = as_decimal(margin_percentage) if margin_percentage else Decimal(0)
        recommended_price = cost_after_coefficient * (Decimal(1) + margin / Decimal(100))

        return CostResult(
            internal_cost=internal_cost,
            coefficient=coefficient,
            cost_after_coefficient=cost_after_coefficient,
            margin_percentage=margin,
            recommended_price=recommended_price,
            total_units=total_units,
        )

    def convert_units(
        self,
        units_by_role_id: Mapping[int, Decimal],
        from_mode: CalculationMode,
        to_mode: CalculationMode,
    ) -> dict[int, Decimal]:
        return convert_units(units_by_role_id, from_mode, to_mode, self.hours_per_day)

    def total_days(self, result: CostResult, mode: CalculationMode) -> Decimal:
        return to_days(result.total_units, mode, self.hours_per_day)

    def work_line_items(
        self,
        units_by_role_id: Mapping[int, Decimal],
        mode: CalculationMode,
    ) -> list[WorkLineItem]:
        """Line items normalised to days; the rate is expressed per day so days × rate = line cost."""
        items = []
        for rate, units in self._billable(units_by_role_id):
            per_day = self.unit_rate(rate, mode)
            if mode == CalculationMode.HOURLY:
                per_day = per_day * Decimal(self.hours_per_day)
            items.append(
                WorkLineItem(
                    role_id=rate.id,
                    role_name=rate.role_name,
                    units_consumed=to_days(units, mode, self.hours_per_day),
                    unit_rate_used=per_day,
                )
            )
        return items

    def billable_roles(self, units_by_role_id: Mapping[int, Decimal]) -> list[tuple[str, Decimal]]:
        """(role name, quantity) for roles that count towards the cost."""
        return [(rate.role_name, units) for rate, units in self._billable(units_by_role_id)]

    def generate_justification(
        self,
        result: CostResult,
        units_by_role_id: Mapping[int, Decimal],
        mode: CalculationMode,
        client_type: NamedCoefficient | None = None,
        project_type: ComplexityLabelled | None = None,
    ) -> list[str] | None:
        return generate_justification(
            result,
            self.billable_roles(units_by_role_id),
            mode,
            client_type=client_type,
            project_type=project_type,
            hours_per_day=self.hours_per_day,
        )
