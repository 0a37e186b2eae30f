"""
Booking request and response schemas.

Slot instants travel as RFC3339 strings in the ``datetime`` field; responses
always render them in canonical UTC form.
"""

import datetime as dt
from typing import Any, List, Optional

from pydantic import Field, field_validator

from ..core.constants import BOOKING_NOTES_MAX_LENGTH, MAX_DB_INT
from ..core.slots import format_slot
from .base import ResponseModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Request to reserve one of a guide's published slots.

    ``datetime`` is parsed by the booking service so that a malformed value
    is reported with the INVALID_FORMAT error code.
    """

    guide_id: int = Field(..., gt=0, le=MAX_DB_INT, description="Guide to book")
    datetime: str = Field(..., min_length=1, description="Slot start, RFC3339 with offset")
    notes: Optional[str] = Field(None, max_length=BOOKING_NOTES_MAX_LENGTH)


class BookingCancel(StrictRequestModel):
    """Schema for cancelling a booking."""

    reason: Optional[str] = Field(None, max_length=500, description="Cancellation reason")

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class GuideSummary(ResponseModel):
    id: int
    name: str
    expertise: str
    availability: List[str]


class BookingResponse(ResponseModel):
    id: int
    user_id: int
    guide_id: int
    datetime: str
    booking_status: str
    notes: Optional[str] = None
    created_at: dt.datetime
    cancelled_at: Optional[dt.datetime] = None
    cancellation_reason: Optional[str] = None
    guide: Optional[GuideSummary] = None

    @classmethod
    def from_booking(cls, booking: Any) -> "BookingResponse":
        """Create BookingResponse from a Booking ORM model."""
        guide = booking.guide
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            guide_id=booking.guide_id,
            datetime=format_slot(booking.slot_at),
            booking_status=booking.status,
            notes=booking.notes,
            created_at=booking.created_at,
            cancelled_at=booking.cancelled_at,
            cancellation_reason=booking.cancellation_reason,
            guide=GuideSummary(
                id=guide.id,
                name=guide.name,
                expertise=guide.expertise,
                availability=guide.canonical_availability,
            )
            if guide is not None
            else None,
        )
