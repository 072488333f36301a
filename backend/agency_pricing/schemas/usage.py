"""Usage history schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class UsageEventResponse(BaseModel):
    id: int
    user_id: int | None
    action: str
    details: dict[str, Any] | None
    created_at: datetime

    class Config:
        from_attributes = True
