"""
Domain exceptions for the booking core.

Every error carries a stable `code` (the error kind shown to callers),
a human-readable message and optional structured details. The API layer
renders them uniformly; see app.api.errors.
"""

from typing import Any, Dict, Optional

from fastapi import status


class BookingError(Exception):
    """Base class for all errors raised by the booking core."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "InternalError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class ValidationError(BookingError):
    """Malformed or missing input. Always fixable by the client."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ValidationError"


class NotFoundError(BookingError):
    """Space or booking is absent, or the space is inactive."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"


class ConflictError(BookingError):
    """Requested interval overlaps an active booking on the same space."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "Conflict"


class StaleStateError(ConflictError):
    """A concurrent writer changed the record between read and write."""

    status_code = status.HTTP_409_CONFLICT
    code = "StaleState"


class UnauthorizedError(BookingError):
    """Actor is authenticated but does not own the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "Unauthorized"


class InvalidTransitionError(BookingError):
    """The state machine rejected the requested status change."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "InvalidTransition"


class PaymentError(BookingError):
    """Payment could not be initiated or verified with the provider."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "PaymentError"


class InternalError(BookingError):
    """Opaque failure of a collaborator (storage, network)."""
