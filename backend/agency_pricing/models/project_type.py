"""Project categories."""
from enum import Enum as PyEnum

from sqlalchemy import Boolean, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agency_pricing.database import Base


class ComplexityLevel(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectType(Base):
    """Project category, used as a label and for the justification text."""

    __tablename__ = "project_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    complexity_level: Mapped[str] = mapped_column(
        Enum(ComplexityLevel, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ComplexityLevel.MEDIUM,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
