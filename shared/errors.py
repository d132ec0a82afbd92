"""
Shared error handling for the leaderboard service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ServiceException(Exception):
    """Base exception for service errors."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class RequestTimeoutError(ServiceException):
    """Raised when a request exceeds its deadline."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            "REQUEST_TIMEOUT",
            f"{operation} timed out",
            {"timeout_seconds": timeout_seconds}
        )
