"""
Database models for the guide booking platform.

- User: booking requesters
- Guide: guides and their published slots
- Booking: reservations of guide slots
"""

from .booking import ALLOWED_TRANSITIONS, Booking, BookingStatus
from .guide import Guide
from .user import User

__all__ = [
    "ALLOWED_TRANSITIONS",
    "Booking",
    "BookingStatus",
    "Guide",
    "User",
]
