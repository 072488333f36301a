"""SQLAlchemy models."""
from agency_pricing.models.client_type import ClientType
from agency_pricing.models.daily_rate import DailyRate
from agency_pricing.models.margin import Margin
from agency_pricing.models.project_type import ComplexityLevel, ProjectType
from agency_pricing.models.simulation import Simulation
from agency_pricing.models.usage import UsageEvent
from agency_pricing.models.user import CustomRole, LegacyRole, User, UserRole

__all__ = [
    "ClientType",
    "ComplexityLevel",
    "CustomRole",
    "DailyRate",
    "LegacyRole",
    "Margin",
    "ProjectType",
    "Simulation",
    "UsageEvent",
    "User",
    "UserRole",
]
