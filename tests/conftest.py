"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports.

Every test gets its own in-memory SQLite database and a temporary static
directory, so nothing touches a real PostgreSQL server or the working tree.
"""

import sys
from pathlib import Path

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from adapters.storage_adapter import LocalStorageBackend
from app.config import Settings
from app.context import AppContext
from app.factory import create_app
from domain.models import init_database
from test_fixtures import ADMIN_PASSWORD, ADMIN_USERNAME, build_settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return build_settings(tmp_path)


@pytest.fixture
def context(settings) -> Generator[AppContext, None, None]:
    """An application context with its schema created, outside any HTTP app"""
    ctx = AppContext.from_settings(settings)
    init_database(ctx.engine)
    try:
        yield ctx
    finally:
        ctx.close()


@pytest.fixture
def db_session(context) -> Generator[Session, None, None]:
    """
    Database session for tests that exercise repositories and services directly.

    Yields:
        Session: SQLAlchemy session on the test's private database
    """
    session = context.session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def storage(settings) -> LocalStorageBackend:
    return LocalStorageBackend(
        upload_dir=settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        max_bytes=settings.max_upload_bytes,
    )


@pytest.fixture
def client(settings) -> Generator[TestClient, None, None]:
    """TestClient with the lifespan run: tables created and the admin seeded"""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def app_session(client) -> Generator[Session, None, None]:
    """Session on the same database the client's app uses"""
    session = client.app.state.context.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_client(client) -> TestClient:
    """Client carrying the admin's auth cookie"""
    response = client.post(
        "/login",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
