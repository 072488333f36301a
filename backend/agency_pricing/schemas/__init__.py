"""Pydantic schemas."""
from agency_pricing.schemas.auth import Token, UserCreate, UserLogin, UserResponse
from agency_pricing.schemas.calculation import (
    CalculationMode,
    CalculationPreview,
    CalculationRequest,
    CostResult,
    UnitConversionRequest,
    UnitConversionResponse,
)
from agency_pricing.schemas.client_type import ClientTypeCreate, ClientTypeResponse, ClientTypeUpdate
from agency_pricing.schemas.daily_rate import DailyRateCreate, DailyRateResponse, DailyRateUpdate
from agency_pricing.schemas.margin import MarginCreate, MarginResponse, MarginUpdate
from agency_pricing.schemas.project_type import ProjectTypeCreate, ProjectTypeResponse, ProjectTypeUpdate
from agency_pricing.schemas.role import (
    CustomRoleCreate,
    CustomRoleResponse,
    CustomRoleUpdate,
    RoleCapabilitiesResponse,
)
from agency_pricing.schemas.simulation import (
    ClientTypeSnapshot,
    ProjectTypeSnapshot,
    SimulationCommitResponse,
    SimulationCreate,
    SimulationRecordInput,
    SimulationResponse,
    WorkLineItem,
)
from agency_pricing.schemas.statistics import StatisticsResponse
from agency_pricing.schemas.usage import UsageEventResponse
from agency_pricing.schemas.user import UserListItem, UserRoleUpdate

__all__ = [
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "CalculationMode",
    "CalculationPreview",
    "CalculationRequest",
    "CostResult",
    "UnitConversionRequest",
    "UnitConversionResponse",
    "ClientTypeCreate",
    "ClientTypeResponse",
    "ClientTypeUpdate",
    "DailyRateCreate",
    "DailyRateResponse",
    "DailyRateUpdate",
    "MarginCreate",
    "MarginResponse",
    "MarginUpdate",
    "ProjectTypeCreate",
    "ProjectTypeResponse",
    "ProjectTypeUpdate",
    "CustomRoleCreate",
    "CustomRoleResponse",
    "CustomRoleUpdate",
    "RoleCapabilitiesResponse",
    "ClientTypeSnapshot",
    "ProjectTypeSnapshot",
    "SimulationCommitResponse",
    "SimulationCreate",
    "SimulationRecordInput",
    "SimulationResponse",
    "WorkLineItem",
    "StatisticsResponse",
    "UsageEventResponse",
    "UserListItem",
    "UserRoleUpdate",
]
