"""Shared router helpers."""
from typing import TypeVar

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from agency_pricing.engine.calculator import PricingEngine
from agency_pricing.services.catalog_service import DailyRateCatalog
from agency_pricing.services.result import NotFoundError, PersistenceError, Result, ValidationError

T = TypeVar("T")


def unwrap(result: Result[T]) -> T:
    """Return the data of a successful Result, or raise the matching HTTP error."""
    error = result.error
    if error is None:
        return result.data
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, PersistenceError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


async def load_engine(db: AsyncSession) -> PricingEngine:
    """Pricing engine over the current active rate catalog."""
    rates = unwrap(await DailyRateCatalog(db).list_active())
    return PricingEngine(rates)
