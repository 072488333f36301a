"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agency_pricing.config import get_settings
from agency_pricing.database import init_db
from agency_pricing.logging_config import setup_logging
from agency_pricing.routers import (
    auth,
    calculations,
    client_types,
    daily_rates,
    margins,
    project_types,
    roles,
    simulations,
    statistics,
    usage,
    users,
)

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting agency pricing API (%s)", settings.app_env)
    await init_db()
    yield


app = FastAPI(
    title="Agency Pricing Simulator",
    description="Rate catalogs, price calculation, simulation history and statistics",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(daily_rates.router)
app.include_router(client_types.router)
app.include_router(margins.router)
app.include_router(project_types.router)
app.include_router(calculations.router)
app.include_router(simulations.router)
app.include_router(statistics.router)
app.include_router(roles.router)
app.include_router(usage.router)
app.include_router(users.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
