"""
API request/response schemas.
"""
from .circuit import (
    ParameterUpdate,
    ParameterBatchUpdate,
    CitrateDoseRequest,
    ChatRequest,
    ChatResponse,
    SessionCreated,
    AdvisoriesResponse,
    PartActivation,
    HealthResponse,
)

__all__ = [
    "ParameterUpdate",
    "ParameterBatchUpdate",
    "CitrateDoseRequest",
    "ChatRequest",
    "ChatResponse",
    "SessionCreated",
    "AdvisoriesResponse",
    "PartActivation",
    "HealthResponse",
]
