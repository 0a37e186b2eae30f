"""Database engine factory."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    database = make_url(url).database
    return database in (None, "", ":memory:")


def _build_postgres_connect_args(config: Settings) -> dict[str, Any]:
    # statement_timeout/lock_timeout bound every blocking point so a stuck
    # query surfaces as a timeout instead of hanging the request.
    return {
        "connect_timeout": config.db_connect_timeout,
        "options": (
            f"-c statement_timeout={config.db_statement_timeout_ms} "
            f"-c lock_timeout={config.db_lock_timeout_ms}"
        ),
        "application_name": "guidebook_api",
    }


def _add_pool_events(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        if engine.dialect.name == "sqlite":
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
        logger.debug("Database connection established")

    @event.listens_for(engine, "checkout")
    def _on_checkout(_dbapi_connection: Any, _connection_record: Any, _proxy: Any) -> None:
        logger.debug("Connection checked out from pool")

    @event.listens_for(engine, "checkin")
    def _on_checkin(_dbapi_connection: Any, _connection_record: Any) -> None:
        logger.debug("Connection returned to pool")

    @event.listens_for(engine, "invalidate")
    def _on_invalidate(_dbapi_connection: Any, _connection_record: Any, exception: Any) -> None:
        logger.warning(
            "Connection invalidated",
            extra={
                "event": "db_connection_invalidated",
                "exception": str(exception) if exception else "unknown",
            },
        )


def build_engine(url: str, config: Optional[Settings] = None) -> Engine:
    """Create an engine with bounded waits for the configured dialect."""
    config = config or settings
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        kwargs: dict[str, Any] = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": config.sqlite_busy_timeout_s,
            },
        }
        if _is_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs = {
            "pool_size": config.db_pool_size,
            "max_overflow": config.db_max_overflow,
            "pool_timeout": config.db_pool_timeout,
            "pool_recycle": 300,
            "pool_pre_ping": True,
            "connect_args": _build_postgres_connect_args(config),
        }

    engine = create_engine(url, future=True, **kwargs)
    _add_pool_events(engine)
    return engine


__all__ = ["build_engine"]
