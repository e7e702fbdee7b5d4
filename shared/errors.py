"""
Shared error handling for the Access Mediator.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class MediatorException(Exception):
    """Base exception for Access Mediator components."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidArgumentError(MediatorException):
    """Raised when a caller passes an unusable argument (e.g. a missing request key)."""

    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_ARGUMENT", message, details)


class DelegateFailureError(MediatorException):
    """Raised when the wrapped delegate cannot be built or fails while handling a request."""

    def __init__(self, stage: str, message: str = "Delegate failure", details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details["stage"] = stage
        self.stage = stage
        super().__init__("DELEGATE_FAILURE", message, details)


class ConfigurationError(MediatorException):
    """Configuration-related errors."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
