"""
FastAPI dependencies: database sessions, services and the current user.
"""

from ...auth import get_current_user_id
from ...core.config import get_app_settings
from .database import get_database, get_db
from .services import (
    get_auth_service,
    get_booking_service,
    get_guide_service,
)

__all__ = [
    "get_app_settings",
    "get_auth_service",
    "get_booking_service",
    "get_current_user_id",
    "get_database",
    "get_db",
    "get_guide_service",
]
