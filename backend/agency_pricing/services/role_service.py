"""Custom role management and the database-backed role source."""
from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.rbac import LEGACY_ROLE_TO_SYSTEM_ROLE, normalize_capabilities
from agency_pricing.models.user import CustomRole, LegacyRole, UserRole
from agency_pricing.schemas.role import CustomRoleCreate, CustomRoleResponse, CustomRoleUpdate
from agency_pricing.services.result import (
    DuplicateError,
    NotFoundError,
    PersistenceError,
    Result,
    ValidationError,
)

logger = logging.getLogger(__name__)


def is_admin_role(role: CustomRole) -> bool:
    return role.is_system and role.name == LEGACY_ROLE_TO_SYSTEM_ROLE[LegacyRole.ADMIN]


class SqlRoleSource:
    """RoleSource over the user_roles and custom_roles tables."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_assignment(self, user_id: int) -> UserRole | None:
        result = await self.db.execute(select(UserRole).where(UserRole.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_custom_role(self, role_id: int) -> CustomRole | None:
        return await self.db.get(CustomRole, role_id)

    async def get_system_role(self, name: str) -> CustomRole | None:
        result = await self.db.execute(
            select(CustomRole).where(CustomRole.name == name, CustomRole.is_system.is_(True))
        )
        return result.scalar_one_or_none()


class RoleService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _failed(self, action: str, exc: SQLAlchemyError) -> Result:
        logger.error("Failed to %s role: %s", action, exc)
        await self.db.rollback()
        return Result.failure(PersistenceError(f"Could not {action} role"))

    async def _name_taken(self, name: str, exclude_id: int | None = None) -> bool:
        query = select(CustomRole.id).where(func.lower(CustomRole.name) == name.lower())
        if exclude_id is not None:
            query = query.where(CustomRole.id != exclude_id)
        return (await self.db.execute(query)).first() is not None

    async def list(self) -> Result[list[CustomRoleResponse]]:
        """System roles first, then by name."""
        try:
            result = await self.db.execute(
                select(CustomRole).order_by(CustomRole.is_system.desc(), CustomRole.name)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as exc:
            return await self._failed("list", exc)
        return Result.success([CustomRoleResponse.model_validate(r) for r in rows])

    async def create(self, data: CustomRoleCreate) -> Result[CustomRoleResponse]:
        try:
            if await self._name_taken(data.name):
                return Result.failure(DuplicateError(f"Role '{data.name}' already exists"))
            role = CustomRole(
                name=data.name,
                description=data.description,
                permissions=normalize_capabilities(data.permissions),
                is_system=False,
            )
            self.db.add(role)
            await self.db.flush()
            await self.db.refresh(role)
        except SQLAlchemyError as exc:
            return await self._failed("create", exc)
        logger.info("Created role %s (%s)", role.id, role.name)
        return Result.success(CustomRoleResponse.model_validate(role))

    async def update(self, role_id: int, data: CustomRoleUpdate) -> Result[CustomRoleResponse]:
        try:
            role = await self.db.get(CustomRole, role_id)
            if role is None:
                return Result.failure(NotFoundError("Role not found"))
            changes = data.model_dump(exclude_unset=True)
            name = changes.get("name")
            if name is not None:
                name = name.strip()
                if role.is_system and name != role.name:
                    return Result.failure(ValidationError("System roles cannot be renamed"))
                if await self._name_taken(name, exclude_id=role_id):
                    return Result.failure(DuplicateError(f"Role '{name}' already exists"))
                role.name = name
            if "description" in changes:
                role.description = changes["description"]
            if changes.get("permissions") is not None:
                permissions = normalize_capabilities(changes["permissions"])
                if is_admin_role(role) and permissions != normalize_capabilities(role.permissions):
                    return Result.failure(ValidationError("The Admin role's permissions cannot be changed"))
                role.permissions = permissions
            await self.db.flush()
            await self.db.refresh(role)
        except SQLAlchemyError as exc:
            return await self._failed("update", exc)
        return Result.success(CustomRoleResponse.model_validate(role))

    async def delete(self, role_id: int) -> Result[None]:
        try:
            role = await self.db.get(CustomRole, role_id)
            if role is None:
                return Result.failure(NotFoundError("Role not found"))
            if role.is_system:
                return Result.failure(ValidationError("System roles cannot be deleted"))
            assigned = await self.db.execute(
                select(func.count()).select_from(UserRole).where(UserRole.custom_role_id == role_id)
            )
            count = assigned.scalar_one()
            if count:
                return Result.failure(ValidationError(f"Role is still assigned to {count} user(s)"))
            await self.db.delete(role)
            await self.db.flush()
        except SQLAlchemyError as exc:
            return await self._failed("delete", exc)
        logger.info("Deleted role %s", role_id)
        return Result.success(None)
