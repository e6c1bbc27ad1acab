"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    CRRTAdvisorError,
    ParameterValidationError,
    UnknownPartError,
    AdvisoryServiceError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "CRRTAdvisorError",
    "ParameterValidationError",
    "UnknownPartError",
    "AdvisoryServiceError",
]
