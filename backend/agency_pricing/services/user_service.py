"""User management: listing with role and activity, role changes, deletion."""
import logging
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agency_pricing.auth.rbac import LEGACY_ROLE_TO_SYSTEM_ROLE
from agency_pricing.models.usage import UsageEvent
from agency_pricing.models.user import CustomRole, LegacyRole, User, UserRole
from agency_pricing.schemas.user import UserListItem, UserRoleUpdate
from agency_pricing.services.auth_service import get_user
from agency_pricing.services.result import NotFoundError, PersistenceError, Result, ValidationError

logger = logging.getLogger(__name__)

UsageSummary = tuple[int, datetime | None]


def to_list_item(user: User, usage: UsageSummary = (0, None)) -> UserListItem:
    """Flatten a user and its assignment. Unassigned users read as sales."""
    assignment = user.role_assignment
    role = LegacyRole(assignment.role) if assignment and assignment.role else LegacyRole.SALES
    custom_role = assignment.custom_role if assignment and assignment.custom_role_id is not None else None
    return UserListItem(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        role=role,
        custom_role_id=custom_role.id if custom_role else None,
        role_name=custom_role.name if custom_role else LEGACY_ROLE_TO_SYSTEM_ROLE[role],
        usage_count=usage[0],
        last_activity=usage[1],
        created_at=user.created_at,
    )


async def usage_summary(db: AsyncSession, user_ids: list[int] | None = None) -> dict[int, UsageSummary]:
    query = select(
        UsageEvent.user_id,
        func.count(UsageEvent.id),
        func.max(UsageEvent.created_at),
    ).group_by(UsageEvent.user_id)
    if user_ids is not None:
        query = query.where(UsageEvent.user_id.in_(user_ids))
    rows = (await db.execute(query)).all()
    return {user_id: (count, last) for user_id, count, last in rows if user_id is not None}


async def list_users(db: AsyncSession) -> Result[list[UserListItem]]:
    """Every account with its role and usage, newest first."""
    try:
        result = await db.execute(
            select(User)
            .options(selectinload(User.role_assignment).selectinload(UserRole.custom_role))
            .order_by(User.created_at.desc())
        )
        users = result.scalars().all()
        usage = await usage_summary(db)
    except SQLAlchemyError as exc:
        logger.error("Failed to list users: %s", exc)
        return Result.failure(PersistenceError("Could not load users"))
    return Result.success([to_list_item(u, usage.get(u.id, (0, None))) for u in users])


async def update_role(db: AsyncSession, user_id: int, data: UserRoleUpdate) -> Result[UserListItem]:
    changes = data.model_dump(exclude_unset=True)
    try:
        user = await get_user(db, user_id)
        if user is None:
            return Result.failure(NotFoundError("User not found"))
        custom_role_id = changes.get("custom_role_id")
        if custom_role_id is not None and await db.get(CustomRole, custom_role_id) is None:
            return Result.failure(NotFoundError("Role not found"))

        assignment = user.role_assignment
        if assignment is None:
            assignment = UserRole(user_id=user.id, role=LegacyRole.SALES)
            db.add(assignment)
            user.role_assignment = assignment
        if changes.get("role") is not None:
            assignment.role = changes["role"]
        if "custom_role_id" in changes:
            assignment.custom_role_id = custom_role_id
        await db.flush()
        await db.refresh(assignment, attribute_names=["custom_role"])
        usage = await usage_summary(db, [user.id])
    except SQLAlchemyError as exc:
        logger.error("Failed to update role of user %s: %s", user_id, exc)
        await db.rollback()
        return Result.failure(PersistenceError("Could not update user role"))
    logger.info("User %s now %s / custom role %s", user_id, assignment.role, assignment.custom_role_id)
    return Result.success(to_list_item(user, usage.get(user.id, (0, None))))


async def delete_user(db: AsyncSession, user_id: int, acting_user_id: int) -> Result[None]:
    """Delete an account. Its role assignment cascades, its records keep a null author."""
    if user_id == acting_user_id:
        return Result.failure(ValidationError("You cannot delete your own account"))
    try:
        if await db.get(User, user_id) is None:
            return Result.failure(NotFoundError("User not found"))
        await db.execute(delete(User).where(User.id == user_id))
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Failed to delete user %s: %s", user_id, exc)
        await db.rollback()
        return Result.failure(PersistenceError("Could not delete user"))
    logger.info("Deleted user %s", user_id)
    return Result.success(None)
