"""Database connection and session management."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from linkpay.config import get_settings
from linkpay.models import Base

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def get_engine(database_url: str | None = None) -> Engine:
    """Create database engine."""
    url = database_url or get_settings().database_url
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory used by the orchestrator facade."""
    return sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def create_schema(engine: Engine) -> None:
    """Create all tables (idempotent)."""
    Base.metadata.create_all(engine)


@contextmanager
def unit_of_work(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """One atomic invocation: commit on success, roll back on any exception."""
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
