# guidebook/models/user.py
"""
User model.

Users are the requesters of bookings. Credential handling lives in
``guidebook.auth``; this model only stores the resulting hash.
"""

from sqlalchemy import Column, Integer, String

from ..database import Base
from .types import TimestampMixin


class User(TimestampMixin, Base):
    """
    Registered user account.

    Attributes:
        id: Primary key
        name: Display name
        email: Unique email address used for login
        hashed_password: Bcrypt hashed password
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"
