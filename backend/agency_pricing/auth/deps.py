"""Auth dependencies for FastAPI."""
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.jwt import decode_user_id
from agency_pricing.auth.permissions import resolve_role
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.services.auth_service import get_user
from agency_pricing.services.role_service import SqlRoleSource

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = decode_user_id(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    user = await get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User inactive")
    return user


async def get_role_capabilities(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoleCapabilities:
    return await resolve_role(SqlRoleSource(db), user.id)


def require_capability(*capabilities: Capability):
    """Dependency that lets the request through only if the user holds every capability."""

    async def checker(role: Annotated[RoleCapabilities, Depends(get_role_capabilities)]) -> RoleCapabilities:
        if not role.has_all_capabilities(capabilities):
            missing = [c.value for c in capabilities if not role.has_capability(c)]
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {', '.join(missing)}",
            )
        return role

    return checker
