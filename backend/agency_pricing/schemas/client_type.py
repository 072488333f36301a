"""Client type schemas."""
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class ClientTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    coefficient: Decimal = Field(..., gt=0)
    description: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class ClientTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    coefficient: Decimal | None = Field(None, gt=0)
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class ClientTypeResponse(BaseModel):
    id: int
    name: str
    coefficient: Decimal
    description: str

    class Config:
        from_attributes = True
