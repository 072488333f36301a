"""Persisted pricing simulations."""
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from agency_pricing.database import Base


class Simulation(Base):
    """Immutable record of one pricing calculation.

    client_type and project_type are value snapshots taken at commit time;
    role_days holds work line items normalised to days.
    """

    __tablename__ = "simulations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    client_type: Mapped[dict] = mapped_column(JSONB, nullable=False)
    project_type: Mapped[dict] = mapped_column(JSONB, nullable=False)
    role_days: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    margin: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    internal_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    cost_after_coefficient: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    recommended_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
