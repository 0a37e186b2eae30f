# guidebook/repositories/booking_repository.py
"""
Booking Repository for GuideBook

Data access for bookings:
- Constraint-guarded booking inserts
- Active-booking lookups per guide slot
- User booking listings
- Conditional status transitions

Nothing here commits; BookingService owns the transaction.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..core.slots import ensure_utc
from ..models.booking import ALLOWED_TRANSITIONS, Booking, BookingStatus
from ..models.types import utcnow
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def create(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    # Slot occupancy

    def count_active_bookings(self, guide_id: int, slot_at: datetime) -> int:
        """Number of non-cancelled bookings holding the guide's slot (0 or 1)."""
        query = self.db.query(Booking).filter(
            Booking.guide_id == guide_id,
            Booking.slot_at == ensure_utc(slot_at),
            Booking.status != BookingStatus.CANCELLED.value,
        )
        try:
            return query.count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting active bookings: {str(e)}")
            raise RepositoryException("Failed to count active bookings") from e

    def get_reserved_slots(self, guide_ids: Iterable[int]) -> Dict[int, Set[datetime]]:
        """
        Map each guide id to the instants held by its active bookings.

        Guides without active bookings map to an empty set.
        """
        ids = list(dict.fromkeys(guide_ids))
        reserved: Dict[int, Set[datetime]] = {guide_id: set() for guide_id in ids}
        if not ids:
            return reserved

        query = self.db.query(Booking.guide_id, Booking.slot_at).filter(
            Booking.guide_id.in_(ids),
            Booking.status != BookingStatus.CANCELLED.value,
        )
        try:
            rows = query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading reserved slots: {str(e)}")
            raise RepositoryException("Failed to load reserved slots") from e

        for guide_id, slot_at in rows:
            reserved[guide_id].add(ensure_utc(slot_at))
        return reserved

    # Listing

    def list_for_user(self, user_id: int) -> List[Booking]:
        """All of a user's bookings, any status, most recent slot first."""
        query = (
            self.db.query(Booking)
            .options(joinedload(Booking.guide))
            .filter(Booking.user_id == user_id)
            .order_by(Booking.slot_at.desc(), Booking.id.desc())
        )
        return self._execute_query(query)

    # Lifecycle

    def transition_status(
        self,
        booking_id: int,
        target: BookingStatus,
        *,
        reason: Optional[str] = None,
    ) -> bool:
        """
        Move a booking to ``target`` only if its current status allows it.

        The status check and the write are one UPDATE statement, so two
        concurrent transitions on the same booking cannot both succeed.

        Returns:
            True when a row was updated.
        """
        allowed_from = [status.value for status in ALLOWED_TRANSITIONS.get(target, frozenset())]
        if not allowed_from:
            return False

        now = utcnow()
        values: Dict[Any, Any] = {Booking.status: target.value, Booking.updated_at: now}
        if target == BookingStatus.CANCELLED:
            values[Booking.cancelled_at] = now
            values[Booking.cancellation_reason] = reason

        try:
            updated = (
                self.db.query(Booking)
                .filter(Booking.id == booking_id, Booking.status.in_(allowed_from))
                .update(values, synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error transitioning booking {booking_id}: {str(e)}")
            raise RepositoryException("Failed to update booking status") from e
        return bool(updated)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.guide))
