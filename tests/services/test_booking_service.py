from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from guidebook.core.exceptions import (
    BookingConflictException,
    ForbiddenException,
    InvalidSlotFormat,
    InvalidStatusTransition,
    NotFoundException,
    RepositoryException,
    ServiceUnavailableException,
    SlotAlreadyBookedException,
    SlotNotOfferedException,
    ValidationException,
)
from guidebook.models import BookingStatus
from guidebook.monitoring.prometheus_metrics import REGISTRY
from guidebook.services.booking_service import BookingService

SLOT_1 = "2030-01-01T10:00:00Z"
SLOT_2 = "2030-01-01T11:00:00Z"


class _DriverError(Exception):
    """Stand-in for a DBAPI exception carrying a SQLSTATE."""

    def __init__(self, message: str, pgcode: str | None = None):
        super().__init__(message)
        self.pgcode = pgcode


def _outcome_count(outcome: str) -> float:
    return REGISTRY.get_sample_value("guidebook_booking_outcomes_total", {"outcome": outcome}) or 0.0


@pytest.fixture
def service(db) -> BookingService:
    return BookingService(db)


class TestReserve:
    def test_creates_pending_booking(self, service, user, guide):
        booking = service.create_booking(user.id, guide.id, SLOT_1, notes="  first trip  ")

        assert booking.id is not None
        assert booking.status == BookingStatus.PENDING.value
        assert booking.slot_at == datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc)
        assert booking.notes == "first trip"

    def test_blank_notes_are_stored_as_none(self, service, user, guide):
        booking = service.create_booking(user.id, guide.id, SLOT_1, notes="   ")

        assert booking.notes is None

    def test_equivalent_instant_is_a_duplicate(self, service, make_user, guide):
        service.create_booking(make_user().id, guide.id, "2030-01-01T10:00:00Z")

        with pytest.raises(SlotAlreadyBookedException) as exc_info:
            service.create_booking(make_user().id, guide.id, "2030-01-01T11:00:00+01:00")

        assert exc_info.value.details["datetime"] == SLOT_1

    def test_same_user_cannot_double_book_either(self, service, user, guide):
        service.create_booking(user.id, guide.id, SLOT_1)

        with pytest.raises(SlotAlreadyBookedException):
            service.create_booking(user.id, guide.id, SLOT_1)

    def test_cancellation_frees_the_slot(self, service, make_user, guide):
        first_user, second_user = make_user(), make_user()
        first = service.create_booking(first_user.id, guide.id, SLOT_1)
        service.cancel_booking(first.id, first_user.id)

        rebooked = service.create_booking(second_user.id, guide.id, SLOT_1)

        assert rebooked.id != first.id
        assert rebooked.status == BookingStatus.PENDING.value

    def test_rejects_slots_the_guide_does_not_offer(self, service, user, guide):
        with pytest.raises(SlotNotOfferedException):
            service.create_booking(user.id, guide.id, "2030-01-01T12:00:00Z")

    def test_rejects_malformed_slot_text(self, service, user, guide):
        with pytest.raises(InvalidSlotFormat):
            service.create_booking(user.id, guide.id, "2030-01-01 10:00")

    def test_unknown_guide_is_not_found(self, service, user):
        with pytest.raises(NotFoundException) as exc_info:
            service.create_booking(user.id, 9999, SLOT_1)

        assert exc_info.value.code == "GUIDE_NOT_FOUND"

    def test_malformed_stored_slots_do_not_block_booking(self, service, user, make_guide):
        guide = make_guide(availability=["not-a-slot", SLOT_2, 17])

        booking = service.create_booking(user.id, guide.id, SLOT_2)

        assert booking.id is not None

    def test_unknown_user_violates_foreign_key(self, service, guide):
        with pytest.raises(ValidationException) as exc_info:
            service.create_booking(424242, guide.id, SLOT_1)

        assert exc_info.value.code == "INVALID_REFERENCE"

    def test_outcomes_are_counted(self, service, make_user, guide):
        created_before = _outcome_count("created")
        booked_before = _outcome_count("already_booked")

        service.create_booking(make_user().id, guide.id, SLOT_1)
        with pytest.raises(SlotAlreadyBookedException):
            service.create_booking(make_user().id, guide.id, SLOT_1)

        assert _outcome_count("created") == created_before + 1
        assert _outcome_count("already_booked") == booked_before + 1


class TestReserveErrorClassification:
    @pytest.fixture
    def failing_service(self, db):
        repository = MagicMock()
        return BookingService(db, repository=repository), repository

    def _reserve(self, service, user, guide):
        return service.reserve(guide.id, datetime(2030, 1, 1, 10, tzinfo=timezone.utc), user.id)

    @pytest.mark.parametrize("pgcode", ["40P01", "40001"])
    def test_deadlock_and_serialization_failures_are_conflicts(
        self, failing_service, user, guide, pgcode
    ):
        service, repository = failing_service
        repository.create.side_effect = OperationalError(
            "INSERT", {}, _DriverError("could not serialize access", pgcode=pgcode)
        )

        with pytest.raises(BookingConflictException):
            self._reserve(service, user, guide)

    def test_sqlite_lock_is_a_conflict(self, failing_service, user, guide):
        service, repository = failing_service
        repository.create.side_effect = OperationalError(
            "INSERT", {}, _DriverError("database is locked")
        )

        with pytest.raises(BookingConflictException) as exc_info:
            self._reserve(service, user, guide)

        assert exc_info.value.headers == {"Retry-After": "1"}

    def test_wrapped_contention_is_still_a_conflict(self, failing_service, user, guide):
        service, repository = failing_service
        cause = OperationalError("INSERT", {}, _DriverError("deadlock detected", pgcode="40P01"))
        wrapped = RepositoryException("Failed to create Booking")
        wrapped.__cause__ = cause
        repository.create.side_effect = wrapped

        with pytest.raises(BookingConflictException):
            self._reserve(service, user, guide)

    def test_named_index_violation_is_already_booked(self, failing_service, user, guide):
        service, repository = failing_service
        repository.create.side_effect = IntegrityError(
            "INSERT",
            {},
            _DriverError(
                'duplicate key value violates unique constraint "uq_bookings_active_guide_slot"',
                pgcode="23505",
            ),
        )

        with pytest.raises(SlotAlreadyBookedException):
            self._reserve(service, user, guide)

    def test_statement_timeout_is_unavailable(self, failing_service, user, guide):
        service, repository = failing_service
        repository.create.side_effect = OperationalError(
            "INSERT", {}, _DriverError("canceling statement due to statement timeout", "57014")
        )

        with pytest.raises(ServiceUnavailableException):
            self._reserve(service, user, guide)

    def test_pool_timeout_is_unavailable(self, failing_service, user, guide):
        service, repository = failing_service
        repository.create.side_effect = PoolTimeoutError("QueuePool limit reached")

        with pytest.raises(ServiceUnavailableException):
            self._reserve(service, user, guide)


class TestReads:
    def test_list_user_bookings_most_recent_slot_first(self, service, user, make_user, guide):
        early = service.create_booking(user.id, guide.id, SLOT_1)
        late = service.create_booking(user.id, guide.id, SLOT_2)
        service.cancel_booking(early.id, user.id)

        bookings = service.list_user_bookings(user.id)

        assert [b.id for b in bookings] == [late.id, early.id]
        assert service.list_user_bookings(make_user().id) == []

    def test_get_booking_checks_ownership(self, service, user, make_user, guide):
        booking = service.create_booking(user.id, guide.id, SLOT_1)

        assert service.get_booking(booking.id, user.id).id == booking.id
        with pytest.raises(ForbiddenException):
            service.get_booking(booking.id, make_user().id)
        with pytest.raises(NotFoundException):
            service.get_booking(booking.id + 100, user.id)


class TestLifecycle:
    def test_pending_to_confirmed_to_completed(self, service, user, guide):
        booking = service.create_booking(user.id, guide.id, SLOT_1)

        confirmed = service.confirm_booking(booking.id, user.id)
        assert confirmed.status == BookingStatus.CONFIRMED.value

        completed = service.complete_booking(booking.id, user.id)
        assert completed.status == BookingStatus.COMPLETED.value

    def test_cancel_confirmed_booking_with_reason(self, service, user, guide):
        booking = service.create_booking(user.id, guide.id, SLOT_1)
        service.confirm_booking(booking.id, user.id)

        cancelled = service.cancel_booking(booking.id, user.id, reason="weather")

        assert cancelled.status == BookingStatus.CANCELLED.value
        assert cancelled.cancellation_reason == "weather"
        assert cancelled.cancelled_at is not None

    @pytest.mark.parametrize(
        "setup, action",
        [
            ([], "complete_booking"),
            (["confirm_booking"], "confirm_booking"),
            (["cancel_booking"], "confirm_booking"),
            (["cancel_booking"], "cancel_booking"),
            (["confirm_booking", "complete_booking"], "cancel_booking"),
        ],
    )
    def test_invalid_transitions_are_rejected(self, service, user, guide, setup, action):
        booking = service.create_booking(user.id, guide.id, SLOT_1)
        for step in setup:
            getattr(service, step)(booking.id, user.id)
        status_before = service.get_booking(booking.id, user.id).status

        with pytest.raises(InvalidStatusTransition) as exc_info:
            getattr(service, action)(booking.id, user.id)

        assert exc_info.value.details["current_status"] == status_before
        assert service.get_booking(booking.id, user.id).status == status_before

    def test_only_the_owner_may_transition(self, service, user, make_user, guide):
        booking = service.create_booking(user.id, guide.id, SLOT_1)

        with pytest.raises(ForbiddenException):
            service.cancel_booking(booking.id, make_user().id)

    def test_missing_booking_is_not_found(self, service, user):
        with pytest.raises(NotFoundException):
            service.confirm_booking(31337, user.id)
