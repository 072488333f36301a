"""Auth API routes."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, get_role_capabilities
from agency_pricing.auth.jwt import create_access_token
from agency_pricing.auth.permissions import resolve_role
from agency_pricing.auth.rbac import RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.schemas.auth import Token, UserLogin, UserResponse
from agency_pricing.services.auth_service import authenticate_user, user_to_response
from agency_pricing.services.role_service import SqlRoleSource
from agency_pricing.services.usage_service import LOGIN, track_usage

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(
    data: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    user = await authenticate_user(db, data)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User inactive")
    role = await resolve_role(SqlRoleSource(db), user.id)
    await track_usage(db, user.id, LOGIN)
    token = create_access_token(user.id, user.email)
    return Token(access_token=token, user=user_to_response(user, role))


@router.get("/me", response_model=UserResponse)
async def me(
    user: Annotated[User, Depends(get_current_user)],
    role: Annotated[RoleCapabilities, Depends(get_role_capabilities)],
):
    return user_to_response(user, role)
