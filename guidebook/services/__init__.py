"""
Service layer for GuideBook.

Services hold business rules and own transaction boundaries; routes stay thin.
"""

from .auth_service import AuthService
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .guide_service import GuideListing, GuideService

__all__ = [
    "AuthService",
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "GuideListing",
    "GuideService",
]
