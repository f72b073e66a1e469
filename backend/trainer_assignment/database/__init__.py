"""
Database engine, session factory, and metadata shared across the engine.

The engine is built lazily so importing models never needs a live driver.
"""

from __future__ import annotations

from datetime import datetime
import logging
import threading
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import QueuePool

from trainer_assignment.core.config import settings

logger = logging.getLogger(__name__)

_DEFAULT_CONNECT_ARGS: dict[str, Any] = {
    # Connection timeout: fail fast when the database is unreachable
    "connect_timeout": 5,
    "application_name": "trainer_assignment_engine",
}


class Base(DeclarativeBase):
    """Declarative base for every persisted table."""


SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine with pool settings suited to the dialect."""
    if url.startswith("sqlite"):
        engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=1800,
            pool_pre_ping=True,
            echo=echo,
            connect_args=_DEFAULT_CONNECT_ARGS,
        )
    _attach_pool_listeners(engine)
    return engine


def _attach_pool_listeners(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        logger.debug("Database connection established")

    @event.listens_for(engine, "checkout")
    def receive_checkout(
        dbapi_connection: Any, connection_record: Any, connection_proxy: Any
    ) -> None:
        logger.debug("Connection checked out from pool")


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is not None:
        return _engine
    with _engine_lock:
        if _engine is None:
            _engine = build_engine(settings.database_url, echo=settings.database_echo)
            SessionLocal.configure(bind=_engine)
    return _engine


__all__ = ["Base", "SessionLocal", "build_engine", "get_engine"]
