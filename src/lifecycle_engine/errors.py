"""
Engine Errors

The engine itself returns booleans and summaries; only the transition gate
and the configuration loader raise. The helpers here shape those errors
into the standard API error body used by the calling handlers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


class LifecycleError(Exception):
    """Base class for errors raised by the lifecycle engine."""
    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 400

    def to_dict(self) -> Dict[str, Any]:
        return format_error_response(str(self), code=self.code.value)


class InvalidTransition(LifecycleError):
    """Raised when a status change is not allowed by the transition table."""
    code = ErrorCode.INVALID_TRANSITION
    status_code = 400

    def __init__(
        self,
        entity_id: str,
        from_status: Any,
        to_status: Any,
        allowed: Sequence[str] = (),
    ):
        self.entity_id = entity_id
        self.from_status = from_status
        self.to_status = to_status
        self.allowed = tuple(allowed)
        allowed_text = ", ".join(self.allowed) or "none"
        super().__init__(
            f'Cannot transition from "{from_status}" to "{to_status}". '
            f"Allowed: {allowed_text}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return format_error_response(
            str(self),
            code=self.code.value,
            details={
                "entity_id": self.entity_id,
                "from_status": self.from_status,
                "to_status": self.to_status,
                "allowed": list(self.allowed),
            },
        )


class ScoringConfigError(LifecycleError):
    """Raised when scoring rules cannot be loaded or fail validation."""
    code = ErrorCode.CONFIG_ERROR
    status_code = 500


def format_error_response(
    message: str,
    code: str = ErrorCode.VALIDATION_ERROR.value,
    details: Optional[Dict] = None,
) -> Dict[str, Any]:
    """Format a standard error response with optional details."""
    response = {
        "success": False,
        "error": True,
        "code": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        response["details"] = details
    return response
