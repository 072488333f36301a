"""Period selection over dated records."""
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import TypeVar

T = TypeVar("T")


class PeriodKind(str, Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    TWELVE_MONTHS = "12months"
    CUSTOM = "custom"


# Trailing windows, in days back from now
TRAILING_DAYS = {
    PeriodKind.WEEK: 7,
    PeriodKind.MONTH: 30,
    PeriodKind.THREE_MONTHS: 90,
    PeriodKind.SIX_MONTHS: 180,
    PeriodKind.TWELVE_MONTHS: 365,
}

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateRange:
    start: datetime | date | None = None
    end: datetime | date | None = None

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


def as_local(value: datetime | date) -> datetime:
    """Aware local datetime. Naive values are taken as local time, bare dates as local midnight."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    return value.astimezone()


def period_bounds(
    period: PeriodKind | str,
    custom_range: DateRange | None = None,
    now: datetime | None = None,
) -> tuple[datetime, datetime] | None:
    """Inclusive (start, end) for a period, or None when the period does not filter."""
    period = PeriodKind(period)
    now = as_local(now or datetime.now())

    if period == PeriodKind.ALL:
        return None
    if period == PeriodKind.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0), now
    if period in TRAILING_DAYS:
        return now - timedelta(days=TRAILING_DAYS[period]), now

    if custom_range is None or not custom_range.is_complete:
        return None
    start = as_local(custom_range.start)
    end = as_local(custom_range.end).replace(
        hour=END_OF_DAY.hour,
        minute=END_OF_DAY.minute,
        second=END_OF_DAY.second,
        microsecond=END_OF_DAY.microsecond,
    )
    return start, end


def filter_by_period(
    items: Iterable[T],
    get_date: Callable[[T], datetime | date],
    period: PeriodKind | str,
    custom_range: DateRange | None = None,
    now: datetime | None = None,
) -> list[T]:
    """Items whose date falls inside the period, bounds included, order kept."""
    items = list(items)
    bounds = period_bounds(period, custom_range, now)
    if bounds is None:
        return items
    start, end = bounds
    return [item for item in items if start <= as_local(get_date(item)) <= end]
