# guidebook/repositories/user_repository.py
"""
User Repository for GuideBook

Lookups used by registration and login.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup."""
        try:
            return (
                self.db.query(User)
                .filter(func.lower(User.email) == email.strip().lower())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException("Failed to retrieve user") from e
