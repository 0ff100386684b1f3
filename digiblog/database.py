"""SQLAlchemy engine and sessions for the ``database`` blog backend."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from digiblog.config import settings


class Base(DeclarativeBase):
    """Declarative base for the ``blogs`` table."""


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(url: str) -> Engine:
    """Engine for ``url``; SQL echo is routed through logging, not ``echo=``."""
    kwargs: dict = {"pool_pre_ping": True}
    if is_sqlite(url):
        # Sessions are handed across FastAPI's threadpool.
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)


engine: Engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def create_tables(bind: Engine = engine) -> None:
    """Create missing tables without running migrations."""
    from digiblog.models import blog  # noqa: F401 - registers the blogs table

    Base.metadata.create_all(bind=bind)


def get_db() -> Iterator[Session]:
    """Yield a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts; rolled back if the block raises."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
