"""Calculation API routes - live price preview and unit conversion."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.auth.deps import get_current_user
from agency_pricing.database import get_db
from agency_pricing.models.user import User
from agency_pricing.routers.common import load_engine, unwrap
from agency_pricing.schemas.calculation import (
    CalculationPreview,
    CalculationRequest,
    UnitConversionRequest,
    UnitConversionResponse,
)
from agency_pricing.services.catalog_service import ClientTypeCatalog, ProjectTypeCatalog

router = APIRouter(prefix="/calculations", tags=["calculations"])


@router.post("/preview", response_model=CalculationPreview)
async def preview(
    data: CalculationRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    engine = await load_engine(db)
    client_type = None
    if data.client_type_id is not None:
        client_type = unwrap(await ClientTypeCatalog(db).get(data.client_type_id))
    project_type = None
    if data.project_type_id is not None:
        project_type = unwrap(await ProjectTypeCatalog(db).get(data.project_type_id))

    result = engine.compute_cost(
        data.units_by_role_id,
        data.mode,
        client_type=client_type,
        margin_percentage=data.margin_percentage,
    )
    justification = engine.generate_justification(
        result,
        data.units_by_role_id,
        data.mode,
        client_type=client_type,
        project_type=project_type,
    )
    return CalculationPreview(mode=data.mode, result=result, justification=justification)


@router.post("/convert-units", response_model=UnitConversionResponse)
async def convert_units(
    data: UnitConversionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    engine = await load_engine(db)
    converted = engine.convert_units(data.units_by_role_id, data.from_mode, data.to_mode)
    return UnitConversionResponse(mode=data.to_mode, units_by_role_id=converted)
