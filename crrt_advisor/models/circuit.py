"""
Pydantic schemas for the circuit advisor API.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ParameterUpdate(BaseModel):
    """Set one field of the parameter model."""
    field: str = Field(..., description="Parameter name, e.g. 'qb' or 'dilution'")
    value: Any = Field(..., description="New value; enums by name, e.g. 'Post'")


class ParameterBatchUpdate(BaseModel):
    """Set several fields at once; rejected as a whole if any is invalid."""
    values: Dict[str, Any]


class CitrateDoseRequest(BaseModel):
    target_dose: float = Field(..., description="Target citrate dose, mmol/L blood")


class ChatRequest(BaseModel):
    query: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    query: str
    text: str


class SessionCreated(BaseModel):
    session_id: str
    version: int


class AdvisoriesResponse(BaseModel):
    pressure: str
    clinical: str
    is_warning: bool


class PartActivation(BaseModel):
    identifier: str
    query: str
    version: int
    text: Optional[str] = None
    is_current: bool = True


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    active_sessions: int
    explanations_available: bool
