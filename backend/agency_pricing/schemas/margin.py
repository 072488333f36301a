"""Margin schemas."""
from pydantic import BaseModel, Field


class MarginCreate(BaseModel):
    percentage: int = Field(..., gt=0, le=100)
    is_active: bool = True


class MarginUpdate(BaseModel):
    percentage: int | None = Field(None, gt=0, le=100)
    is_active: bool | None = None


class MarginResponse(BaseModel):
    id: int
    percentage: int
    is_active: bool

    class Config:
        from_attributes = True
