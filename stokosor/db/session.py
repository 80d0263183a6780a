"""SQLAlchemy engine, session factory and transaction helpers."""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..core.config import get_settings

# ``Base`` is the parent class for every SQLAlchemy model defined in stokosor/models.
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
    # SQLite ships with foreign keys off; cascades depend on this pragma.
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def make_engine(url: str) -> Engine:
    """Build an engine; SQLite connections get foreign keys switched on.

    In-memory URLs share one connection so every session sees the same
    database.
    """

    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False keeps attribute values readable after commit so
    # repositories can copy rows into their caches.
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return make_engine(get_settings().database_url)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return make_session_factory(get_engine())


@contextmanager
def transaction(session_factory: sessionmaker) -> Iterator[Session]:
    """Open a session and commit on success, roll back on any exception."""

    db: Session = session_factory()
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
    finally:
        db.close()
