"""Client categories and their price coefficient."""
from decimal import Decimal

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agency_pricing.database import Base


class ClientType(Base):
    """Client category. coefficient multiplies internal cost (1.0 = neutral)."""

    __tablename__ = "client_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    coefficient: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=1)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
