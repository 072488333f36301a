"""Custom role schemas."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from agency_pricing.auth.rbac import unknown_capabilities


def known_capabilities(v: dict[str, bool] | None) -> dict[str, bool] | None:
    if v is None:
        return v
    unknown = unknown_capabilities(v.keys())
    if unknown:
        raise ValueError(f"Unknown capabilities: {', '.join(unknown)}")
    return v


class CustomRoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    permissions: dict[str, bool] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("permissions")
    @classmethod
    def check_permissions(cls, v: dict[str, bool]) -> dict[str, bool]:
        return known_capabilities(v)


class CustomRoleUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    permissions: dict[str, bool] | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("permissions")
    @classmethod
    def check_permissions(cls, v: dict[str, bool] | None) -> dict[str, bool] | None:
        return known_capabilities(v)


class CustomRoleResponse(BaseModel):
    id: int
    name: str
    description: str | None
    permissions: dict[str, bool]
    is_system: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class RoleCapabilitiesResponse(BaseModel):
    role_id: int | None
    role_name: str | None
    permissions: dict[str, bool]
