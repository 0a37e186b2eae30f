"""
Shared fixtures.

Every test gets its own in-memory SQLite database so tests never observe
each other's bookings.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from typing import Any, Callable, Dict, Iterator, List, Optional  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from guidebook.auth import create_access_token  # noqa: E402
from guidebook.database import Database  # noqa: E402
from guidebook.main import create_app  # noqa: E402
from guidebook.models import Guide, User  # noqa: E402

MEMORY_URL = "sqlite+pysqlite:///:memory:"

SLOT_1 = "2030-01-01T10:00:00Z"
SLOT_2 = "2030-01-01T11:00:00Z"
SLOT_3 = "2030-01-02T09:30:00Z"


@pytest.fixture
def database() -> Iterator[Database]:
    database = Database(MEMORY_URL).init()
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database: Database) -> Iterator[Session]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(email: Optional[str] = None, name: str = "Test User") -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            hashed_password="not-a-real-hash",
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_guide(db: Session) -> Callable[..., Guide]:
    def _make_guide(
        availability: Optional[List[Any]] = None,
        name: str = "Ada Guide",
        expertise: str = "Hiking",
    ) -> Guide:
        guide = Guide(
            name=name,
            expertise=expertise,
            availability=list(availability if availability is not None else [SLOT_1, SLOT_2]),
        )
        db.add(guide)
        db.commit()
        return guide

    return _make_guide


@pytest.fixture
def user(make_user: Callable[..., User]) -> User:
    return make_user(email="traveler@example.com", name="Traveler")


@pytest.fixture
def guide(make_guide: Callable[..., Guide]) -> Guide:
    return make_guide()


@pytest.fixture
def client(database: Database) -> Iterator[TestClient]:
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers_for() -> Callable[[User], Dict[str, str]]:
    def _headers(target: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(target.id)}"}

    return _headers


@pytest.fixture
def auth_headers(user: User, auth_headers_for: Callable[[User], Dict[str, str]]) -> Dict[str, str]:
    return auth_headers_for(user)
