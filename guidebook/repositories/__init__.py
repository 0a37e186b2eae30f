"""
Repository layer for GuideBook.

Repositories wrap SQLAlchemy queries and never commit; services own
transaction boundaries.
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .guide_repository import GuideRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "GuideRepository",
    "RepositoryFactory",
    "UserRepository",
]
