# guidebook/models/guide.py
"""
Guide model.

A guide publishes an ordered list of appointment start instants. The list is
stored as RFC3339 strings exactly as authored by the (external) availability
management process; parsing and validation happen on read in
``guidebook.core.slots`` so that a bad entry never breaks listing or booking.
"""

from datetime import datetime
from typing import Any, List

from sqlalchemy import JSON, Column, Integer, String
from sqlalchemy.ext.mutable import MutableList

from ..core.slots import canonicalize_slots, parse_valid_slots
from ..database import Base
from .types import TimestampMixin


class Guide(TimestampMixin, Base):
    __tablename__ = "guides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    expertise = Column(String(100), nullable=False, index=True)
    availability = Column(MutableList.as_mutable(JSON), nullable=False, default=list)

    @property
    def offered_slots(self) -> List[datetime]:
        """Parsed, de-duplicated offered instants in published order."""
        raw: Any = self.availability or []
        return parse_valid_slots(raw)

    @property
    def canonical_availability(self) -> List[str]:
        raw: Any = self.availability or []
        return canonicalize_slots(raw)

    def __repr__(self) -> str:
        return f"<Guide {self.id}: {self.name} ({self.expertise})>"
