"""
Custom Exception Hierarchy

Separates input problems (rejected before any state change) from failures
of the external explanation service. Clinical risk is never an exception:
abnormal values are reported through the risk classifier instead.
"""
from typing import Optional, Dict, Any


class CRRTAdvisorError(Exception):
    """Base exception for all circuit advisor errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class ParameterValidationError(CRRTAdvisorError):
    """Unknown field, invalid enum variant, non-numeric or out-of-bounds value."""

    def __init__(
        self,
        message: str,
        field_name: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_PARAMETER",
            details={"field": field_name, **(details or {})}
        )
        self.field_name = field_name


class UnknownPartError(CRRTAdvisorError):
    """Circuit part identifier not present in the diagram registry."""

    def __init__(
        self,
        message: str,
        identifier: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UNKNOWN_PART",
            details={"identifier": identifier, **(details or {})}
        )
        self.identifier = identifier


class AdvisoryServiceError(CRRTAdvisorError):
    """The free-text explanation service is unavailable or failed."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="ADVISORY_SERVICE_ERROR",
            details=details
        )
