"""Capability-based access control."""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from agency_pricing.models.user import LegacyRole


class Capability(str, Enum):
    CREATE_SIMULATIONS = "can_create_simulations"
    VIEW_ALL_SIMULATIONS = "can_view_all_simulations"
    EDIT_DAILY_RATES = "can_edit_daily_rates"
    EDIT_CLIENT_TYPES = "can_edit_client_types"
    EDIT_MARGINS = "can_edit_margins"
    EDIT_PROJECT_TYPES = "can_edit_project_types"
    MANAGE_USERS = "can_manage_users"
    DELETE_USERS = "can_delete_users"
    MANAGE_ROLES = "can_manage_roles"
    VIEW_ANALYTICS = "can_view_analytics"
    VIEW_USAGE_HISTORY = "can_view_usage_history"


CAPABILITY_KEYS = frozenset(c.value for c in Capability)

# Legacy role tag -> name of the system role holding its capabilities
LEGACY_ROLE_TO_SYSTEM_ROLE: dict[LegacyRole, str] = {
    LegacyRole.ADMIN: "Admin",
    LegacyRole.PROJECT_MANAGER: "Chef de Projet",
    LegacyRole.SALES: "Commercial",
}

# Seed capability maps for the system roles
SYSTEM_ROLES: dict[str, tuple[str, dict[str, bool]]] = {
    "Admin": (
        "Accès complet à l'application",
        {c.value: True for c in Capability},
    ),
    "Chef de Projet": (
        "Crée des simulations et gère les catalogues de tarification",
        {
            Capability.CREATE_SIMULATIONS.value: True,
            Capability.VIEW_ALL_SIMULATIONS.value: True,
            Capability.EDIT_DAILY_RATES.value: True,
            Capability.EDIT_CLIENT_TYPES.value: True,
            Capability.EDIT_PROJECT_TYPES.value: True,
            Capability.VIEW_ANALYTICS.value: True,
        },
    ),
    "Commercial": (
        "Crée des simulations et consulte son historique",
        {
            Capability.CREATE_SIMULATIONS.value: True,
            Capability.VIEW_ANALYTICS.value: True,
        },
    ),
}


def _key(capability: "Capability | str") -> str:
    return capability.value if isinstance(capability, Capability) else capability


def normalize_capabilities(raw: Mapping | None) -> dict[str, bool]:
    """Keep only boolean True/False entries; anything else reads as absent."""
    if not raw:
        return {}
    return {str(k): v for k, v in raw.items() if isinstance(v, bool)}


def unknown_capabilities(keys: Iterable[str]) -> list[str]:
    return sorted(k for k in keys if k not in CAPABILITY_KEYS)


@dataclass(frozen=True)
class RoleCapabilities:
    """A user's resolved role. Keys missing from the map are denied."""

    role_id: int | None = None
    role_name: str | None = None
    capabilities: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "capabilities", MappingProxyType(normalize_capabilities(self.capabilities)))

    @property
    def is_empty(self) -> bool:
        return self.role_name is None and not self.capabilities

    def has_capability(self, capability: Capability | str) -> bool:
        return self.capabilities.get(_key(capability)) is True

    def has_any_capability(self, capabilities: Iterable[Capability | str]) -> bool:
        return any(self.has_capability(c) for c in capabilities)

    def has_all_capabilities(self, capabilities: Iterable[Capability | str]) -> bool:
        return all(self.has_capability(c) for c in capabilities)


EMPTY_ROLE = RoleCapabilities()
