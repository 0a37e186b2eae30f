# guidebook/services/auth_service.py
"""
Authentication Service for GuideBook

Handles user registration and credential checks.
Follows the service layer pattern to keep business logic out of routes.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import (
    DUMMY_HASH_FOR_TIMING_ATTACK,
    create_access_token,
    get_password_hash,
    verify_password,
)
from ..core.config import Settings, settings
from ..core.exceptions import ConflictException, RepositoryException, UnauthorizedException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(
        self,
        db: Session,
        user_repository: Optional[UserRepository] = None,
        config: Optional[Settings] = None,
    ) -> None:
        super().__init__(db)
        self.config = config or settings
        self.logger = logging.getLogger(__name__)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("register_user")
    def register_user(self, name: str, email: str, password: str) -> Tuple[User, str]:
        """
        Register a new user and issue an access token.

        Raises:
            ConflictException: If email already exists
        """
        email = email.strip().lower()
        self.log_operation("register_user", email=email)

        with self.read_guard():
            existing_user = self.user_repository.get_by_email(email)
        if existing_user:
            self.logger.warning(f"Registration failed - email already exists: {email}")
            raise ConflictException("Email already registered", code="EMAIL_EXISTS")

        hashed_password = get_password_hash(password)

        with self.transaction():
            try:
                user: User = self.user_repository.create(
                    name=name.strip(), email=email, hashed_password=hashed_password
                )
            except RepositoryException as exc:
                # Lost a race with a concurrent registration for the same email
                if isinstance(exc.__cause__, IntegrityError):
                    raise ConflictException(
                        "Email already registered", code="EMAIL_EXISTS"
                    ) from exc
                raise

        self.logger.info(f"Successfully registered user: {email}")
        return user, create_access_token(user.id, config=self.config)

    @BaseService.measure_operation("authenticate_user")
    def authenticate_user(self, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and issue an access token.

        Raises:
            UnauthorizedException: On unknown email or wrong password
        """
        with self.read_guard():
            user = self.user_repository.get_by_email(email)

        if user is None:
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            self.logger.info("Login failed - unknown email")
            raise UnauthorizedException("Invalid credentials", code="INVALID_CREDENTIALS")

        if not verify_password(password, user.hashed_password):
            self.logger.info(f"Login failed - wrong password for user {user.id}")
            raise UnauthorizedException("Invalid credentials", code="INVALID_CREDENTIALS")

        return user, create_access_token(user.id, config=self.config)
