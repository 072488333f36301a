"""Project types API - project categories and their complexity."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user, require_capability
from agency_pricing.auth.rbac import Capability, RoleCapabilities
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import unwrap
from agency_pricing.schemas.project_type import ProjectTypeCreate, ProjectTypeResponse, ProjectTypeUpdate
from agency_pricing.services.catalog_service import ProjectTypeCatalog
from agency_pricing.services.usage_service import CATALOG_CHANGED, track_usage

router = APIRouter(prefix="/settings", tags=["project-types"])

CanEdit = Annotated[RoleCapabilities, Depends(require_capability(Capability.EDIT_PROJECT_TYPES))]


@router.get("/project-types", response_model=list[ProjectTypeResponse])
async def list_project_types(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    active_only: bool = Query(False),
):
    catalog = ProjectTypeCatalog(db)
    return unwrap(await (catalog.list_active() if active_only else catalog.list()))


@router.post("/project-types", response_model=ProjectTypeResponse)
async def create_project_type(
    data: ProjectTypeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    project_type = unwrap(await ProjectTypeCatalog(db).create(data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "project_types", "op": "create", "id": project_type.id})
    return project_type


@router.patch("/project-types/{project_type_id}", response_model=ProjectTypeResponse)
async def update_project_type(
    project_type_id: int,
    data: ProjectTypeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    project_type = unwrap(await ProjectTypeCatalog(db).update(project_type_id, data))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "project_types", "op": "update", "id": project_type_id})
    return project_type


@router.delete("/project-types/{project_type_id}", status_code=204)
async def delete_project_type(
    project_type_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    _: CanEdit,
):
    unwrap(await ProjectTypeCatalog(db).delete(project_type_id))
    await track_usage(db, user.id, CATALOG_CHANGED, {"catalog": "project_types", "op": "delete", "id": project_type_id})
    return None
