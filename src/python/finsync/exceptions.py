"""Custom exception types for finsync."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """User-facing failure categories."""

    NETWORK_UNREACHABLE = "NetworkUnreachable"
    TIMEOUT = "Timeout"
    UNAUTHORIZED = "Unauthorized"
    CONFLICT = "Conflict"
    INVALID_INPUT = "InvalidInput"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    UNKNOWN = "Unknown"


class FinanceError(Exception):
    """Base class for normalized client errors.

    Attributes:
        message: Human readable message suitable for display.
        category: One of :class:`ErrorCategory`.
        status: HTTP status code, when the failure came from a response.
        details: Optional structured detail, e.g. field level validation messages.
    """

    category = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details or []


class NetworkUnreachableError(FinanceError):
    """Raised when the backend cannot be reached."""

    category = ErrorCategory.NETWORK_UNREACHABLE


class RequestTimeoutError(FinanceError):
    """Raised when a request exceeds its deadline."""

    category = ErrorCategory.TIMEOUT


class UnauthorizedError(FinanceError):
    """Raised on 401 responses."""

    category = ErrorCategory.UNAUTHORIZED


class ConflictError(FinanceError):
    """Raised on 409 responses, e.g. a duplicate account."""

    category = ErrorCategory.CONFLICT


class InvalidInputError(FinanceError):
    """Raised on 400 responses."""

    category = ErrorCategory.INVALID_INPUT


class ServiceUnavailableError(FinanceError):
    """Raised on 503 responses."""

    category = ErrorCategory.SERVICE_UNAVAILABLE


class UnknownError(FinanceError):
    """Raised for any failure without a dedicated category."""


class InvalidResponseError(FinanceError):
    """Raised when a successful response lacks required fields."""


class ResponseError(Exception):
    """Raw non-2xx response raised by the transport before normalization."""

    def __init__(self, status: int, payload: Any, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload
