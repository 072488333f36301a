"""Daily rate schemas."""
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class DailyRateCreate(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=100)
    daily_rate: Decimal = Field(..., gt=0)
    # Omitted -> derived from daily_rate
    hourly_rate: Decimal | None = Field(None, gt=0)
    is_active: bool = True

    @field_validator("role_name", mode="before")
    @classmethod
    def strip_role_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class DailyRateUpdate(BaseModel):
    role_name: str | None = Field(None, min_length=1, max_length=100)
    daily_rate: Decimal | None = Field(None, gt=0)
    hourly_rate: Decimal | None = Field(None, gt=0)
    is_active: bool | None = None

    @field_validator("role_name", mode="before")
    @classmethod
    def strip_role_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class DailyRateResponse(BaseModel):
    id: int
    role_name: str
    daily_rate: Decimal
    hourly_rate: Decimal
    is_active: bool

    class Config:
        from_attributes = True
