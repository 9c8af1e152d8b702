"""
Custom exceptions for the pricing web API.

Provides a hierarchy of exceptions converted to JSON error responses.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(AppException):
    """Raised when input validation fails."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class CatalogValidationError(ValidationError):
    """Raised when submitted template products are malformed."""

    error_code = "CATALOG_VALIDATION_ERROR"


class CurrencyNotSupportedError(ValidationError):
    """Raised when a requested currency cannot be converted to."""

    error_code = "UNSUPPORTED_CURRENCY"

    def __init__(self, message: str, currency: str):
        super().__init__(message, details={"currency": currency})
