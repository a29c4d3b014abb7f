# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets test environment variables before any studentpath import (settings are
# loaded at import time) and provides shared fixtures for route tests.
# =============================================================================

import os
from contextlib import contextmanager
from unittest.mock import MagicMock

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

import pytest
from fastapi.testclient import TestClient

from studentpath.core.auth import get_current_user
from studentpath.core.rate_limit import limiter
from studentpath.main import app
from studentpath.schemas.schemas import AuthUser, UserRole


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_state():
    """Fresh rate-limit counters and no auth overrides for every test."""
    limiter.reset()
    yield
    limiter.reset()
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def make_user(role: UserRole, user_id: int = 1, college_id: int = None) -> AuthUser:
    return AuthUser(
        id=user_id,
        role=role,
        email=f"{role.value}{user_id}@example.com",
        name=f"Test {role.value.title()}",
        college_id=college_id,
    )


@pytest.fixture
def login_as():
    """Log in as a role by overriding the session dependency."""
    def _login(role: UserRole, user_id: int = 1, college_id: int = None) -> AuthUser:
        user = make_user(role, user_id, college_id)
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login


@pytest.fixture
def fake_db():
    """
    A MagicMock standing in for a SQLAlchemy session.

    Patch a module's get_db_session with `fake_db.session` and script
    `fake_db.db.execute` results per test.
    """
    db = MagicMock()

    @contextmanager
    def session():
        yield db

    holder = MagicMock()
    holder.db = db
    holder.session = session
    return holder
