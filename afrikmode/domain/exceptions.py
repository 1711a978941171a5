"""Domain exceptions for the AfrikMode cache service.

These exceptions are independent of infrastructure concerns. The
presentation layer maps them to HTTP responses in exception handlers.
Connectivity problems are never raised as exceptions; the cache layer
absorbs them and serves from the fallback store.
"""

from typing import Any


class AfrikModeException(Exception):
    """Base exception for all AfrikMode application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, key).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AfrikModeException):
    """Raised when input validation fails (e.g. empty pattern)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class CacheSerializationError(AfrikModeException):
    """Value could not be encoded for (or decoded from) the cache."""

    def __init__(self, reason: str, key: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if key is not None:
            details["key"] = key
        super().__init__(
            f"Cache serialization failed: {reason}",
            "CACHE_SERIALIZATION_ERROR",
            details,
        )
