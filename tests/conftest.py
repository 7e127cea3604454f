"""Shared fixtures.

Every test gets its own file-backed SQLite database, so concurrent sessions
in the same test really contend for the same rows.
"""

import os

# The module-level app in bookstore.main is built from the environment on import
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from bookstore.core.config import Settings
from bookstore.database.base import Base
from bookstore.database.session import create_db_engine, create_session_factory
from bookstore.main import create_app
from tests.helpers import make_token


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'bookstore.db'}",
        DB_LOCK_TIMEOUT_MS=30000,
        SECRET_KEY="test-secret",
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_session_factory(client):
    """Session factory bound to the same database the client talks to."""
    return client.app.state.session_factory


@pytest.fixture
def admin_headers(settings) -> dict:
    return {"Authorization": f"Bearer {make_token(settings, 'admin')}"}


@pytest.fixture
def user_headers(settings) -> dict:
    return {"Authorization": f"Bearer {make_token(settings, 'user')}"}
