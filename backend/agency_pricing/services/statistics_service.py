"""Aggregates over saved simulations for the statistics dashboard."""
import math
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from agency_pricing.engine.periods import DateRange, PeriodKind, as_local, filter_by_period
from agency_pricing.schemas.simulation import SimulationResponse
from agency_pricing.schemas.statistics import (
    ClientTypeBreakdown,
    MonthlyPoint,
    StatisticsResponse,
    StatisticsSummary,
)

FRENCH_MONTHS = [
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
]

PERIOD_MONTHS = {
    PeriodKind.TODAY: 1,
    PeriodKind.WEEK: 1,
    PeriodKind.MONTH: 1,
    PeriodKind.THREE_MONTHS: 3,
    PeriodKind.SIX_MONTHS: 6,
    PeriodKind.TWELVE_MONTHS: 12,
}


def month_count(period: PeriodKind | str, custom_range: DateRange | None = None, default: int = 6) -> int:
    """How many months the monthly chart shows for a period."""
    period = PeriodKind(period)
    if period in PERIOD_MONTHS:
        return PERIOD_MONTHS[period]
    if period == PeriodKind.CUSTOM and custom_range is not None and custom_range.is_complete:
        span = as_local(custom_range.end) - as_local(custom_range.start)
        return min(max(math.ceil(span.days / 30), 1), 12)
    return default


def summarize(simulations: Iterable[SimulationResponse]) -> StatisticsSummary:
    prices = [s.recommended_price for s in simulations]
    total = sum(prices, Decimal(0))
    average = total / len(prices) if prices else Decimal(0)
    return StatisticsSummary(count=len(prices), total_revenue=total, average_price=average)


def by_client_type(simulations: Iterable[SimulationResponse]) -> list[ClientTypeBreakdown]:
    """Count and revenue per client type name, highest revenue first."""
    groups: dict[str, ClientTypeBreakdown] = {}
    for sim in simulations:
        name = sim.client_type.name
        entry = groups.setdefault(name, ClientTypeBreakdown(client_type=name, count=0, total=Decimal(0)))
        entry.count += 1
        entry.total += sim.recommended_price
    return sorted(groups.values(), key=lambda g: g.total, reverse=True)


def _last_months(now: datetime, months: int) -> list[tuple[int, int]]:
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def by_month(
    simulations: Iterable[SimulationResponse],
    months: int,
    now: datetime | None = None,
) -> list[MonthlyPoint]:
    """The last `months` calendar months up to now, oldest first; empty months are zero."""
    now = as_local(now or datetime.now())
    points = {
        key: MonthlyPoint(
            month=f"{key[0]:04d}-{key[1]:02d}",
            label=f"{FRENCH_MONTHS[key[1] - 1]} {key[0]}",
            count=0,
            total=Decimal(0),
        )
        for key in _last_months(now, months)
    }
    for sim in simulations:
        created = as_local(sim.created_at)
        point = points.get((created.year, created.month))
        if point is not None:
            point.count += 1
            point.total += sim.recommended_price
    return list(points.values())


def build_statistics(
    simulations: Iterable[SimulationResponse],
    period: PeriodKind | str = PeriodKind.ALL,
    custom_range: DateRange | None = None,
    now: datetime | None = None,
    default_months: int = 6,
) -> StatisticsResponse:
    period = PeriodKind(period)
    selected = filter_by_period(simulations, lambda s: s.created_at, period, custom_range, now)
    return StatisticsResponse(
        period=period.value,
        summary=summarize(selected),
        by_client_type=by_client_type(selected),
        by_month=by_month(selected, month_count(period, custom_range, default_months), now),
    )
