# guidebook/core/exceptions.py
"""
Domain-specific exceptions for the guide booking platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to HTTPException using the class-level status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
            headers=self.headers,
        )


class ValidationException(DomainException):
    """Raised when client input fails validation."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceUnavailableException(DomainException):
    """Raised when persistence is unreachable or an operation timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    headers = {"Retry-After": "2"}

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or "Service temporarily unavailable. Please retry.",
            code="UNAVAILABLE",
            details=details,
        )


# Specific booking exceptions


class InvalidSlotFormat(ValidationException):
    """Raised when a slot string is not a timezone-qualified RFC3339 instant."""

    def __init__(self, value: Any):
        super().__init__(
            message="Invalid datetime format. Please use RFC3339 format (e.g., 2006-01-02T15:04:05Z).",
            code="INVALID_FORMAT",
            details={"value": str(value)[:64]},
        )


class SlotNotOfferedException(BusinessRuleException):
    """Raised when the requested instant is not one of the guide's published slots."""

    def __init__(self, guide_id: int, slot: str):
        super().__init__(
            message="The guide is not available at the requested time slot.",
            code="SLOT_NOT_OFFERED",
            details={"guide_id": guide_id, "datetime": slot},
        )


class SlotAlreadyBookedException(ConflictException):
    """Raised when an active booking already holds the guide's slot."""

    def __init__(self, guide_id: int, slot: str):
        super().__init__(
            message="This time slot has already been booked.",
            code="SLOT_ALREADY_BOOKED",
            details={"guide_id": guide_id, "datetime": slot},
        )


class BookingConflictException(ConflictException):
    """Raised on transient storage contention; the caller may retry with backoff."""

    headers = {"Retry-After": "1"}

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "The booking could not be completed due to concurrent activity",
            code="CONFLICT",
            details=details or {},
        )


class InvalidStatusTransition(BusinessRuleException):
    """Raised when a booking cannot move from its current status to the requested one."""

    def __init__(self, booking_id: int, current: str, target: str):
        super().__init__(
            message=f"Booking cannot be {target} - current status: {current}",
            code="INVALID_STATUS_TRANSITION",
            details={"booking_id": booking_id, "current_status": current, "target_status": target},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as database connection
    issues or query failures. Services translate it to a DomainException.
    """


def is_db_pool_exhaustion(exc: Exception) -> bool:
    """Check if an exception indicates DB connection pool exhaustion."""
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )
