"""Statistics schemas."""
from decimal import Decimal

from pydantic import BaseModel


class StatisticsSummary(BaseModel):
    count: int
    total_revenue: Decimal
    average_price: Decimal


class ClientTypeBreakdown(BaseModel):
    client_type: str
    count: int
    total: Decimal


class MonthlyPoint(BaseModel):
    month: str  # YYYY-MM
    label: str
    count: int
    total: Decimal


class StatisticsResponse(BaseModel):
    period: str
    summary: StatisticsSummary
    by_client_type: list[ClientTypeBreakdown]
    by_month: list[MonthlyPoint]
