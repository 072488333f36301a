"""User management schemas."""
from datetime import datetime

from pydantic import BaseModel

from agency_pricing.models.user import LegacyRole


class UserRoleUpdate(BaseModel):
    role: LegacyRole | None = None
    # Explicit null clears the custom role; omitted leaves it as is
    custom_role_id: int | None = None


class UserListItem(BaseModel):
    id: int
    email: str
    full_name: str
    is_active: bool
    role: LegacyRole = LegacyRole.SALES
    custom_role_id: int | None = None
    role_name: str | None = None
    usage_count: int = 0
    last_activity: datetime | None = None
    created_at: datetime | None = None
