"""Daily/hourly cost rates per agency role."""
from decimal import Decimal

from sqlalchemy import Boolean, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from agency_pricing.database import Base


class DailyRate(Base):
    """Cost rate per role. Hourly is stored alongside daily, not recomputed on read."""

    __tablename__ = "daily_rates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    role_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    daily_rate: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
