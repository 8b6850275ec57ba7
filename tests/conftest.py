import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_SQLITE_PATH", ":memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from growup.infrastructure.config import reset_settings
from growup.infrastructure.models import Base
from growup.infrastructure.store import SqlMenteeStore
from growup.web.dependencies import get_db_session
from growup.web.main import create_application


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(session):
    return SqlMenteeStore(session)


def build_app_with_db(session_factory):
    app = create_application()

    def override_get_db_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_session] = override_get_db_session
    return app


@pytest.fixture
def client(session_factory):
    with TestClient(build_app_with_db(session_factory)) as test_client:
        yield test_client
