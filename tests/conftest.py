"""
tests/conftest.py -- Shared test fixtures for Taskboard integration tests.

This module provides:
  - make_settings(): immutable Settings pointing at an isolated in-memory DB
  - api_client: TestClient with one pre-registered user and a long-lived token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

Settings are constructed explicitly and passed to create_app(), so no
environment variables need to be set before importing the app.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.models import User
from auth.passwords import hash_password
from auth.tokens import create_access_token
from core.config import Settings

TEST_SECRET = "test-secret-key-with-at-least-32-characters"
TEST_EMAIL = "testuser@mail.com"
TEST_PASSWORD = "testpass123"


def make_settings(db_suffix: str, **overrides) -> Settings:
    """Build Settings for a test app backed by a named shared-memory DB.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'gate').
    """
    values = {
        "secret_key": TEST_SECRET,
        "database_url": f"sqlite:///file:test_taskboard_{db_suffix}?mode=memory&cache=shared&uri=true",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _start_client(db_suffix: str) -> Generator[tuple[TestClient, str, int], None, None]:
    app = create_app(make_settings(db_suffix))
    with TestClient(app, raise_server_exceptions=True) as client:
        # Lifespan has run: the stores exist on app.state.
        uid = app.state.user_store.create_user(
            User(
                email=TEST_EMAIL,
                first_name="Test",
                last_name="User",
                hashed_password=hash_password(TEST_PASSWORD),
            )
        )
        # Long-lived token so tests are not racing the 60 s default lifetime.
        token = create_access_token(TEST_SECRET, uid, 3600)
        yield client, token, uid


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app and real lifespan, with stores
    pointed at a shared-memory DB unique to the requesting test module.
    """
    yield from _start_client(request.module.__name__.rsplit(".", 1)[-1])
