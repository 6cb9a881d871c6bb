"""
Database engine, session factory, and metadata shared across the application.

Repositories and services are synchronous. Async callers (the realtime
handler, the broadcast engine) hop onto a worker thread with
``run_in_session`` so every concurrent unit of work owns its own session.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from datetime import datetime
import logging
from typing import Any, Callable, Generator, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

_POSTGRES_POOL_KWARGS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 5,
    "pool_recycle": 300,
    "pool_pre_ping": True,
}


def build_engine(db_url: str, *, echo: bool = False) -> Engine:
    """Create an engine with per-dialect connection settings."""
    if db_url.startswith("sqlite"):
        # Worker threads share the file; wait on the write lock instead of failing
        return create_engine(
            db_url,
            echo=echo,
            future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    return create_engine(db_url, echo=echo, future=True, **_POSTGRES_POOL_KWARGS)


engine: Engine = build_engine(settings.database_url, echo=settings.database_echo)


@event.listens_for(Engine, "connect")
def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Session scope for work outside a request: commit, or roll back and re-raise."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


T = TypeVar("T")


def call_in_session(func: Callable[[Session], T]) -> T:
    with get_db_session() as session:
        return func(session)


async def run_in_session(func: Callable[[Session], T]) -> T:
    """Run ``func(session)`` on a worker thread with a dedicated session."""
    return await asyncio.to_thread(call_in_session, func)


def init_db(bind: Engine | None = None) -> None:
    """Create any missing tables on ``bind``, or wherever SessionLocal is bound."""
    import app.models  # noqa: F401  (register mappers)

    Base.metadata.create_all(bind=bind or SessionLocal.kw.get("bind") or engine)


__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "call_in_session",
    "engine",
    "get_db",
    "get_db_session",
    "init_db",
    "run_in_session",
]
