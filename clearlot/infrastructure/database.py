"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from clearlot.config import Settings, get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


def _build_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the configured database URL."""

    url = settings.database_url
    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        # Sessions are opened from worker threads by the notification store.
        connect_args["check_same_thread"] = False
    logger.debug("Creating database engine for %s", url.split("://", 1)[0])
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


settings = get_settings()
engine = _build_engine(settings)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database() -> None:
    """Ensure all ORM models have corresponding database tables."""

    from clearlot.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = ["Base", "SessionLocal", "engine", "get_db", "initialize_database"]
