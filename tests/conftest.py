from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from deadline_api.backend.main import app
from deadline_api.backend.tools import timeutil
from deadline_api.database.db import Base, get_db, init_db


class FrozenClock:
    """Stand-in for ``timeutil.utcnow`` that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def mock_env(monkeypatch, tmp_path):
    """Keep audit files out of the working tree and start from default settings."""
    monkeypatch.setenv("AUDIT_LOG_DIR", str(tmp_path / "audit_logs"))
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def clock(monkeypatch):
    frozen = FrozenClock(datetime(2030, 1, 15, 12, 0, 0))
    monkeypatch.setattr(timeutil, "utcnow", frozen)
    return frozen


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    test_engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    init_db(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin():
    return {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def as_user():
    def headers(user_id: str = "user-1"):
        return {"X-User-Id": user_id, "X-User-Role": "user"}

    return headers
