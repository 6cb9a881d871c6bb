# backend/tests/conftest.py
"""
Pytest configuration for the SocietyHub backend.

Every test gets its own SQLite file. The global ``SessionLocal`` is rebound
to it so that request sessions, ``run_in_session`` worker threads and the
test's own ``db`` session all see the same data. Data written through
``db`` must be committed before exercising code that opens its own session.
"""

import os

# Set test configuration BEFORE any app imports
os.environ.setdefault("SECRET_KEY", "societyhub-test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable, Iterator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.database import Base, SessionLocal, build_engine, engine as default_engine
import app.models  # noqa: F401  (register mappers)
from app.models.user import User
from app.services.messaging.connection_manager import connection_manager


@pytest.fixture
def test_engine(tmp_path) -> Iterator[Engine]:
    engine = build_engine(f"sqlite:///{tmp_path / 'societyhub-test.db'}")
    Base.metadata.create_all(bind=engine)
    SessionLocal.configure(bind=engine)
    try:
        yield engine
    finally:
        SessionLocal.configure(bind=default_engine)
        engine.dispose()


@pytest.fixture
def db(test_engine) -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(autouse=True)
def _reset_connection_manager() -> Iterator[None]:
    connection_manager.reset()
    yield
    connection_manager.reset()


@pytest.fixture
def user_factory(db: Session) -> Callable[..., User]:
    """Create and commit a resident."""
    counter = {"n": 0}

    def _create(**overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        values = {
            "email": f"resident{n}@societyhub.test",
            "full_name": f"Resident {n}",
            "flat_number": f"A-{100 + n}",
            "is_active": True,
            "is_suspended": False,
            "is_admin": False,
        }
        values.update(overrides)
        user = User(**values)
        db.add(user)
        db.commit()
        return user

    return _create


@pytest.fixture
def alice(user_factory) -> User:
    return user_factory(full_name="Alice Rao", flat_number="B-201")


@pytest.fixture
def bob(user_factory) -> User:
    return user_factory(full_name="Bob Mehta", flat_number="C-305")


@pytest.fixture
def carol(user_factory) -> User:
    return user_factory(full_name="Carol Dsouza", flat_number="D-410")


@pytest.fixture
def client(test_engine) -> Iterator[TestClient]:
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
