"""Project type schemas."""
from typing import Literal

from pydantic import BaseModel, Field, field_validator

ComplexityLiteral = Literal["low", "medium", "high"]


class ProjectTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: str = ""
    complexity_level: ComplexityLiteral = "medium"
    is_active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProjectTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    description: str | None = None
    complexity_level: ComplexityLiteral | None = None
    is_active: bool | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProjectTypeResponse(BaseModel):
    id: int
    name: str
    description: str
    complexity_level: ComplexityLiteral
    is_active: bool = True

    @field_validator("complexity_level", mode="before")
    @classmethod
    def enum_to_value(cls, v):
        return v.value if hasattr(v, "value") else v

    class Config:
        from_attributes = True
