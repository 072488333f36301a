"""Authentication service."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agency_pricing.auth.jwt import get_password_hash, verify_password
from agency_pricing.auth.rbac import RoleCapabilities
from agency_pricing.models.user import CustomRole, User, UserRole
from agency_pricing.schemas.auth import UserCreate, UserLogin, UserResponse
from agency_pricing.services.result import DuplicateError, NotFoundError, Result

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.role_assignment).selectinload(UserRole.custom_role))
    )
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: UserCreate) -> Result[User]:
    """Create a user with a single role assignment."""
    existing = await db.execute(select(User.id).where(User.email == data.email))
    if existing.first() is not None:
        return Result.failure(DuplicateError("Email already registered"))
    if data.custom_role_id is not None and await db.get(CustomRole, data.custom_role_id) is None:
        return Result.failure(NotFoundError("Role not found"))

    user = User(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        full_name=data.full_name,
    )
    db.add(user)
    await db.flush()
    db.add(UserRole(user_id=user.id, role=data.role, custom_role_id=data.custom_role_id))
    await db.flush()
    logger.info("Created user %s (%s)", user.id, user.email)
    return Result.success(await get_user(db, user.id))


async def authenticate_user(db: AsyncSession, data: UserLogin) -> User | None:
    """Authenticate user by email and password."""
    result = await db.execute(
        select(User)
        .where(User.email == data.email)
        .options(selectinload(User.role_assignment).selectinload(UserRole.custom_role))
    )
    user = result.scalar_one_or_none()
    if not user or not verify_password(data.password, user.hashed_password):
        logger.info("Failed login for %s", data.email)
        return None
    return user


def user_to_response(user: User, role: RoleCapabilities) -> UserResponse:
    """Convert user to response with its resolved role."""
    assignment = user.role_assignment
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        role=assignment.role if assignment else None,
        role_name=role.role_name,
        permissions=dict(role.capabilities),
    )
