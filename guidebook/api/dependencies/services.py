"""
Service layer dependencies for dependency injection.

Each request gets fresh service instances bound to its own session and to
the settings the application was built with.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import Settings, get_app_settings
from ...services.auth_service import AuthService
from ...services.booking_service import BookingService
from ...services.guide_service import GuideService
from .database import get_db


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Get BookingService instance wired to the request session."""
    return BookingService(db)


def get_guide_service(
    db: Session = Depends(get_db), config: Settings = Depends(get_app_settings)
) -> GuideService:
    return GuideService(db, config=config)


def get_auth_service(
    db: Session = Depends(get_db), config: Settings = Depends(get_app_settings)
) -> AuthService:
    """Get AuthService instance."""
    return AuthService(db, config=config)
