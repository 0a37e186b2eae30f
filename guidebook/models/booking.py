# guidebook/models/booking.py
"""
Booking model.

A booking reserves one guide slot for one user. The reserved instant is
immutable; the record is never deleted, only moved through its lifecycle.

Architecture: the "one active booking per guide slot" rule is enforced by the
partial unique index ``uq_bookings_active_guide_slot`` (rows whose status is
not ``cancelled``). Application code never relies on a check-then-insert
sequence; a lost race surfaces as an IntegrityError from the insert itself.
"""

from enum import Enum
import logging
from typing import Any, Dict, FrozenSet

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship

from ..core.constants import ACTIVE_SLOT_INDEX_NAME
from ..database import Base
from .types import TimestampMixin, UTCDateTime

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Created, awaiting guide confirmation
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"  # Frees the slot for re-booking
    COMPLETED = "completed"


# target status -> statuses it may be entered from
ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.PENDING}),
    BookingStatus.CANCELLED: frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED}),
    BookingStatus.COMPLETED: frozenset({BookingStatus.CONFIRMED}),
}

ACTIVE_SLOT_PREDICATE = "status <> 'cancelled'"


class Booking(TimestampMixin, Base):
    """Reservation of a single guide slot by a single user."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    guide_id = Column(Integer, ForeignKey("guides.id", ondelete="CASCADE"), nullable=False)

    slot_at = Column(UTCDateTime(), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    notes = Column(Text, nullable=True)

    # Cancellation tracking
    cancelled_at = Column(UTCDateTime(), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    user = relationship("User", backref="bookings")
    guide = relationship("Guide", backref="bookings")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
        Index(
            ACTIVE_SLOT_INDEX_NAME,
            "guide_id",
            "slot_at",
            unique=True,
            postgresql_where=text(ACTIVE_SLOT_PREDICATE),
            sqlite_where=text(ACTIVE_SLOT_PREDICATE),
        ),
        Index("ix_bookings_guide_status", "guide_id", "status"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: user={self.user_id}, guide={self.guide_id}, "
            f"slot={self.slot_at}, status={self.status}>"
        )

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED.value

    def can_transition_to(self, target: BookingStatus) -> bool:
        allowed = ALLOWED_TRANSITIONS.get(target, frozenset())
        return BookingStatus(self.status) in allowed
