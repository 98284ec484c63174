"""Shared fixtures: a throwaway SQLite database per test and an API client bound to it."""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from zabaan.core.config import get_settings
from zabaan.core.rate_limit import limiter
from zabaan.db.base import Base
from zabaan.db.session import get_db
from zabaan.main import app
from zabaan.models.user import User

PASSWORD = "correct-horse-9"


@pytest.fixture
def db_url(tmp_path):
    """File-backed SQLite with the schema created through the sync driver."""
    path = tmp_path / "test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_factory(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def user(db):
    """A stored user for service-level tests (never logs in)."""
    u = User(email="learner@example.com", hashed_password="x", display_name="Learner", timezone="UTC")
    db.add(u)
    await db.commit()
    await db.refresh(u)
    return u


@pytest.fixture
def settings(monkeypatch):
    """The cached settings object; attribute changes are undone after the test."""
    s = get_settings()
    monkeypatch.setattr(s, "retry_base_delay", 0.0)
    return s


@pytest.fixture
def client(session_factory, settings):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.reset()


@pytest.fixture
def register_user(client):
    """Register through the API and return bearer auth headers for the new user."""

    def register(email="learner@example.com", **extra):
        response = client.post("/auth/register", json={"email": email, "password": PASSWORD, **extra})
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return register


@pytest.fixture
def auth_headers(register_user):
    return register_user(timezone="UTC")
