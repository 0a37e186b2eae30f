"""
Database handle, session factory, and metadata shared across the application.

The engine is owned by a ``Database`` instance that the application creates at
startup and disposes at shutdown; nothing here opens a connection on import.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from ..core.config import Settings
from .engines import build_engine

logger = logging.getLogger(__name__)

Base: DeclarativeMeta = declarative_base()


class Database:
    """
    Explicit storage handle.

    Usage:
        database = Database(settings.database_url, config=settings)
        database.init()
        with database.session_scope() as db:
            ...
        database.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        engine: Optional[Engine] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.url = url
        self.config = config
        self._engine: Optional[Engine] = engine
        self._session_factory: Optional[sessionmaker] = None
        if engine is not None:
            self._bind(engine)

    def _bind(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database has not been initialized; call init() first")
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def init(self) -> "Database":
        """Create the engine and session factory (idempotent)."""
        if self._engine is None:
            self._bind(build_engine(self.url, self.config))
            logger.info("Database engine initialized (dialect=%s)", self._engine.dialect.name)
        return self

    def create_all(self) -> None:
        # Import models so Base.metadata is populated
        from .. import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connection pool disposed")
        self._engine = None
        self._session_factory = None

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database has not been initialized; call init() first")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager for short-lived DB operations."""
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


__all__ = ["Base", "Database"]
