"""Selectable margin percentages."""
from sqlalchemy import Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from agency_pricing.database import Base


class Margin(Base):
    """Margin option. Percentage uniqueness is checked by the catalog service on write."""

    __tablename__ = "margins"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
