"""Auth schemas."""
from pydantic import BaseModel, EmailStr, Field

from agency_pricing.models.user import LegacyRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str
    role: LegacyRole = LegacyRole.SALES
    custom_role_id: int | None = None


class UserLogin(BaseModel):
    email: str  # str to allow dev/internal emails like admin@agency.local
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    full_name: str
    is_active: bool
    role: LegacyRole | None = None
    role_name: str | None = None
    permissions: dict[str, bool] = {}


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
