# guidebook/api/dependencies/database.py
"""
Database-related dependencies.
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from ...database import Database


def get_database(request: Request) -> Database:
    """The Database handle created by the application lifespan."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields:
        Database session that will be closed after use
    """
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
