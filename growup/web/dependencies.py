from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from growup.application.guard import SubmissionGuard
from growup.application.wizards import WizardRegistry
from growup.infrastructure.config import DatabaseConfig, get_settings
from growup.infrastructure.db import create_database_engine, create_session_factory
from growup.infrastructure.store import SqlMenteeStore
from growup.utils.seed import initialise_database


def get_db_config(request: Request) -> DatabaseConfig:
    config = getattr(request.app.state, "db_config", None)
    if config is None:
        config = get_settings().database
        request.app.state.db_config = config
    return config


def get_session_factory(request: Request) -> sessionmaker[Session]:
    config = get_db_config(request)
    cached_factory = getattr(request.app.state, "session_factory", None)
    cached_config = getattr(request.app.state, "session_factory_config", None)

    current_config_dict = config.model_dump()
    if cached_factory is not None and cached_config == current_config_dict:
        return cached_factory

    engine = create_database_engine(config)
    initialise_database(engine)
    session_factory = create_session_factory(engine)

    request.app.state.db_engine = engine
    request.app.state.session_factory = session_factory
    request.app.state.session_factory_config = current_config_dict
    return session_factory


def get_db_session(request: Request) -> Generator[Session, None, None]:
    session_factory = get_session_factory(request)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_store(db: Session = Depends(get_db_session)) -> SqlMenteeStore:
    return SqlMenteeStore(db)


def get_guard(request: Request) -> SubmissionGuard:
    return request.app.state.submission_guard


def get_wizards(request: Request) -> WizardRegistry:
    return request.app.state.wizards
