"""
Custom exceptions for the FLEXR analytics library.

Only invalid caller input and storage failures are raised. Missing or
partial data degrades to well-defined defaults instead (zeroed zones,
quality 0, None pace metrics), implausible sensor samples are filtered,
and duplicate ingestion is a no-op.

Each exception includes:
- A descriptive message
- An error code for collaborator-facing responses
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error records."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    STORAGE_ERROR = "STORAGE_ERROR"


class FlexrAnalyticsError(Exception):
    """
    Base exception for all analytics errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for error records."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class InvalidParameterError(FlexrAnalyticsError, ValueError):
    """Raised when a caller passes a value no calculation can accept."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if parameter:
            error_details["parameter"] = parameter
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_PARAMETER,
            details=error_details,
        )


class StorageError(FlexrAnalyticsError):
    """Raised when the workout store fails to read or write."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            details=error_details,
        )
