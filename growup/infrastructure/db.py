"""
Database engine and session factory built from the centralized configuration.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import DatabaseConfig, get_settings
from .exceptions import handle_persistence_error
from .logging import get_logger

logger = get_logger(__name__)


def create_database_engine(config: DatabaseConfig | None = None) -> Engine:
    """
    Create the SQLAlchemy engine for the configured backend.

    Example:
        >>> engine = create_database_engine(DatabaseConfig(sqlite_path=":memory:"))
    """
    if config is None:
        config = get_settings().database

    connection_url = config.get_connection_url()
    logger.info("Creating database engine for %s backend", config.backend)
    logger.debug("Connection URL: %s@***", connection_url.split("@")[0])

    try:
        return create_engine(connection_url, **config.get_engine_options())
    except SQLAlchemyError as e:
        logger.error("Failed to create database engine: %s", e)
        raise handle_persistence_error(e, "create engine") from e


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    if engine is None:
        engine = create_database_engine()

    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def make_engine_and_session(
    config: DatabaseConfig | None = None,
) -> tuple[Engine, sessionmaker[Session]]:
    """
    Engine plus session factory, for scripts and tests.

    Example:
        >>> engine, SessionLocal = make_engine_and_session()
        >>> with SessionLocal() as session:
        ...     pass
    """
    engine = create_database_engine(config)
    return engine, create_session_factory(engine)