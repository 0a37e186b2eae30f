# guidebook/services/booking_service.py
"""
Booking Service for GuideBook

Handles all booking-related business logic:
- Reserving a guide slot (the conflict guard)
- Listing and reading a user's bookings
- Status transitions (confirm, cancel, complete)

At most one active booking may hold a (guide, slot) pair. That rule is owned
by the partial unique index on the bookings table; this service inserts
optimistically and classifies whatever the database reports.
"""

from datetime import datetime
from typing import List, NoReturn, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import ACTIVE_SLOT_INDEX_NAME
from ..core.exceptions import (
    BookingConflictException,
    ForbiddenException,
    InvalidStatusTransition,
    NotFoundException,
    RepositoryException,
    ServiceUnavailableException,
    SlotAlreadyBookedException,
    SlotNotOfferedException,
    ValidationException,
    is_db_pool_exhaustion,
)
from ..core.slots import ensure_utc, format_slot, parse_slot
from ..models.booking import Booking, BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.guide_repository import GuideRepository
from .availability_service import AvailabilityService
from .base import BaseService

# SQLSTATE codes for transient contention
DEADLOCK_PGCODES = frozenset({"40P01", "40001"})
# SQLite reports the unique index through its columns, not its name
SQLITE_ACTIVE_SLOT_MESSAGE = "bookings.guide_id, bookings.slot_at"


def _pgcode(exc: SQLAlchemyError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _is_active_slot_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", "") or ""
    if constraint_name == ACTIVE_SLOT_INDEX_NAME:
        return True
    text = str(orig)
    return ACTIVE_SLOT_INDEX_NAME in text or SQLITE_ACTIVE_SLOT_MESSAGE in text


def _is_contention_error(exc: OperationalError) -> bool:
    if _pgcode(exc) in DEADLOCK_PGCODES:
        return True
    message = str(exc).lower()
    return "deadlock detected" in message or "database is locked" in message


class BookingService(BaseService):
    """Service layer for booking operations."""

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        guide_repository: Optional[GuideRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.guide_repository = guide_repository or RepositoryFactory.create_guide_repository(db)
        self.availability_service = availability_service or AvailabilityService(
            db, booking_repository=self.repository
        )

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        requester_id: int,
        guide_id: int,
        slot_text: str,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Parse the requested slot and reserve it.

        Raises:
            InvalidSlotFormat: If ``slot_text`` is not RFC3339 with an offset
        """
        instant = parse_slot(slot_text)
        cleaned_notes = notes.strip() if notes else None
        return self.reserve(guide_id, instant, requester_id, notes=cleaned_notes or None)

    @BaseService.measure_operation("reserve")
    def reserve(
        self,
        guide_id: int,
        instant: datetime,
        requester_id: int,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Create a pending booking for a guide's published slot.

        The insert is the only check for an existing booking; whichever
        transaction commits its row first wins.

        Raises:
            NotFoundException: If the guide doesn't exist
            SlotNotOfferedException: If the instant is not a published slot
            SlotAlreadyBookedException: If an active booking holds the slot
            BookingConflictException: On transient contention (retryable)
            ServiceUnavailableException: If storage is unreachable or timed out
        """
        instant = ensure_utc(instant)
        slot_text = format_slot(instant)

        with self.read_guard():
            guide = self.guide_repository.get_by_id(guide_id, load_relationships=False)
        if guide is None:
            raise NotFoundException(
                "Guide not found", code="GUIDE_NOT_FOUND", details={"guide_id": guide_id}
            )

        if not self.availability_service.is_offered_slot(guide, instant):
            prometheus_metrics.inc_booking_outcome("not_offered")
            raise SlotNotOfferedException(guide_id, slot_text)

        try:
            booking = self.repository.create(
                user_id=requester_id,
                guide_id=guide_id,
                slot_at=instant,
                status=BookingStatus.PENDING.value,
                notes=notes,
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            self._raise_for_integrity_error(exc, guide_id, slot_text)
        except OperationalError as exc:
            self.db.rollback()
            self._raise_for_operational_error(exc, guide_id, slot_text)
        except RepositoryException as exc:
            self.db.rollback()
            cause = exc.__cause__
            if isinstance(cause, OperationalError):
                self._raise_for_operational_error(cause, guide_id, slot_text)
            self._raise_unavailable(exc, guide_id, slot_text)
        except SQLAlchemyError as exc:
            self.db.rollback()
            self._raise_unavailable(exc, guide_id, slot_text)

        prometheus_metrics.inc_booking_outcome("created")
        self.log_operation(
            "reserve", booking_id=booking.id, guide_id=guide_id, user_id=requester_id, slot=slot_text
        )
        return booking

    def _raise_for_integrity_error(
        self, exc: IntegrityError, guide_id: int, slot_text: str
    ) -> NoReturn:
        if _is_active_slot_violation(exc):
            prometheus_metrics.inc_booking_outcome("already_booked")
            self.logger.info(
                "Slot already booked",
                extra={"guide_id": guide_id, "slot": slot_text},
            )
            raise SlotAlreadyBookedException(guide_id, slot_text) from exc

        self.logger.warning(
            "Booking insert rejected by constraint",
            extra={"guide_id": guide_id, "slot": slot_text, "error": str(exc.orig)},
        )
        raise ValidationException(
            "Booking references data that does not exist",
            code="INVALID_REFERENCE",
            details={"guide_id": guide_id},
        ) from exc

    def _raise_for_operational_error(
        self, exc: OperationalError, guide_id: int, slot_text: str
    ) -> NoReturn:
        if _is_contention_error(exc):
            prometheus_metrics.inc_booking_outcome("conflict")
            self.logger.warning(
                "Booking insert hit concurrent activity",
                extra={"guide_id": guide_id, "slot": slot_text, "pgcode": _pgcode(exc)},
            )
            raise BookingConflictException(
                details={"guide_id": guide_id, "datetime": slot_text}
            ) from exc
        self._raise_unavailable(exc, guide_id, slot_text)

    def _raise_unavailable(self, exc: Exception, guide_id: int, slot_text: str) -> NoReturn:
        prometheus_metrics.inc_booking_outcome("unavailable")
        self.logger.error(
            "Booking storage unavailable",
            extra={
                "guide_id": guide_id,
                "slot": slot_text,
                "pool_exhausted": is_db_pool_exhaustion(exc),
            },
        )
        raise ServiceUnavailableException() from exc

    # Reads

    @BaseService.measure_operation("list_user_bookings")
    def list_user_bookings(self, user_id: int) -> List[Booking]:
        with self.read_guard():
            return self.repository.list_for_user(user_id)

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: int, user_id: int) -> Booking:
        return self._get_owned_booking(booking_id, user_id)

    def _get_owned_booking(self, booking_id: int, user_id: int) -> Booking:
        with self.read_guard():
            booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id}
            )
        if booking.user_id != user_id:
            raise ForbiddenException(
                "You can only access your own bookings", code="BOOKING_NOT_OWNED"
            )
        return booking

    # Lifecycle

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: int, user_id: int) -> Booking:
        return self._transition(booking_id, user_id, BookingStatus.CONFIRMED)

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: int, user_id: int, reason: Optional[str] = None) -> Booking:
        """Cancel a pending or confirmed booking; its slot becomes bookable again."""
        return self._transition(booking_id, user_id, BookingStatus.CANCELLED, reason=reason)

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: int, user_id: int) -> Booking:
        return self._transition(booking_id, user_id, BookingStatus.COMPLETED)

    def _transition(
        self,
        booking_id: int,
        user_id: int,
        target: BookingStatus,
        reason: Optional[str] = None,
    ) -> Booking:
        booking = self._get_owned_booking(booking_id, user_id)

        with self.transaction():
            updated = self.repository.transition_status(booking_id, target, reason=reason)

        with self.read_guard():
            self.db.refresh(booking)

        if not updated:
            raise InvalidStatusTransition(booking_id, booking.status, target.value)

        self.log_operation(
            "transition_booking", booking_id=booking_id, user_id=user_id, status=target.value
        )
        return booking
