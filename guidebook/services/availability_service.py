# guidebook/services/availability_service.py
"""
Availability Service for GuideBook

Answers two questions about a guide and an instant:
- is the instant one of the guide's published slots?
- is it already held by an active booking?

Free slots are offered slots minus reserved ones, in published order.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.slots import ensure_utc
from ..models.guide import Guide
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService


class AvailabilityService(BaseService):
    def __init__(self, db: Session, booking_repository: Optional[BookingRepository] = None):
        super().__init__(db)
        self.booking_repository = booking_repository or RepositoryFactory.create_booking_repository(
            db
        )

    @staticmethod
    def is_offered_slot(guide: Guide, instant: datetime) -> bool:
        """Compare by absolute instant against every well-formed published slot."""
        target = ensure_utc(instant)
        return any(offered == target for offered in guide.offered_slots)

    def is_reserved(self, guide: Guide, instant: datetime) -> bool:
        with self.read_guard():
            return self.booking_repository.count_active_bookings(guide.id, instant) > 0

    @BaseService.measure_operation("free_slots_for")
    def free_slots_for(self, guide: Guide) -> List[datetime]:
        return self.free_slots_for_many([guide])[guide.id]

    @BaseService.measure_operation("free_slots_for_many")
    def free_slots_for_many(self, guides: Sequence[Guide]) -> Dict[int, List[datetime]]:
        """
        Free slots for a page of guides with a single reservation query.

        Returns:
            Mapping of guide id to its free instants, published order kept.
        """
        with self.read_guard():
            reserved = self.booking_repository.get_reserved_slots(guide.id for guide in guides)

        return {
            guide.id: [slot for slot in guide.offered_slots if slot not in reserved[guide.id]]
            for guide in guides
        }
