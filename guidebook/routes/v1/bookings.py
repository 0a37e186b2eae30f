# guidebook/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET / - List the current user's bookings, most recent slot first
    POST / - Reserve a guide slot
    GET /{booking_id} - Booking details
    POST /{booking_id}/confirm - Confirm a pending booking
    POST /{booking_id}/cancel - Cancel a pending or confirmed booking
    POST /{booking_id}/complete - Mark a confirmed booking as completed
"""

import logging
from typing import Annotated, List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, Path, status

from ...api.dependencies import get_booking_service, get_current_user_id
from ...core.constants import MAX_DB_INT
from ...core.exceptions import DomainException
from ...schemas.booking import BookingCancel, BookingCreate, BookingResponse
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

BookingId = Annotated[int, Path(gt=0, le=MAX_DB_INT, description="Booking id")]


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception() from exc


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    current_user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    try:
        bookings = booking_service.list_user_bookings(current_user_id)
    except DomainException as e:
        handle_domain_exception(e)
    return [BookingResponse.from_booking(booking) for booking in bookings]


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate,
    current_user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Reserve one of a guide's published slots.

    Returns 409 when the slot is already held by an active booking, or when
    concurrent activity prevented the insert (retryable, with Retry-After).
    """
    try:
        booking = booking_service.create_booking(
            requester_id=current_user_id,
            guide_id=booking_data.guide_id,
            slot_text=booking_data.datetime,
            notes=booking_data.notes,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(booking)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: BookingId,
    current_user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.get_booking(booking_id, current_user_id)
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(booking)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
    booking_id: BookingId,
    current_user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.confirm_booking(booking_id, current_user_id)
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: BookingId,
    cancel_data: Optional[BookingCancel] = Body(None),
    current_user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    reason = cancel_data.reason if cancel_data else None
    try:
        booking = booking_service.cancel_booking(booking_id, current_user_id, reason=reason)
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(booking)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: BookingId,
    current_user_id: int = Depends(get_current_user_id),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = booking_service.complete_booking(booking_id, current_user_id)
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(booking)
