"""Usage history: who did what, and when."""
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.models.usage import UsageEvent
from agency_pricing.schemas.usage import UsageEventResponse
from agency_pricing.services.result import PersistenceError, Result

logger = logging.getLogger(__name__)

LOGIN = "login"
SIMULATION_CREATED = "simulation_created"
CATALOG_CHANGED = "catalog_changed"
ROLE_CHANGED = "role_changed"
USER_CHANGED = "user_changed"


async def track_usage(
    db: AsyncSession,
    user_id: int | None,
    action: str,
    details: dict[str, Any] | None = None,
) -> None:
    """Record an action. Never raises: a tracking failure must not fail the request."""
    try:
        async with db.begin_nested():
            db.add(UsageEvent(user_id=user_id, action=action, details=details))
    except SQLAlchemyError as exc:
        logger.warning("Could not record %s for user %s: %s", action, user_id, exc)


async def list_usage(
    db: AsyncSession,
    user_id: int | None = None,
    action: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 200,
) -> Result[list[UsageEventResponse]]:
    query = select(UsageEvent).order_by(UsageEvent.created_at.desc()).limit(limit)
    if user_id is not None:
        query = query.where(UsageEvent.user_id == user_id)
    if action:
        query = query.where(UsageEvent.action == action)
    if start is not None:
        query = query.where(UsageEvent.created_at >= start)
    if end is not None:
        query = query.where(UsageEvent.created_at <= end)
    try:
        rows = (await db.execute(query)).scalars().all()
    except SQLAlchemyError as exc:
        logger.error("Failed to list usage history: %s", exc)
        return Result.failure(PersistenceError("Could not load usage history"))
    return Result.success([UsageEventResponse.model_validate(r) for r in rows])
