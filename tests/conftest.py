"""Test fixtures for the repositories, cache and API."""

from __future__ import annotations

import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

TESTS_ROOT = Path(__file__).parent
_TEST_DATA = Path(tempfile.mkdtemp(prefix="digiblog-tests-"))

# Point settings at scratch paths *before* importing digiblog modules so the app
# never touches the default data directory.
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DATA / 'digiblog.db'}")
os.environ.setdefault("BLOGS_FILE", str(_TEST_DATA / "blogs.json"))
os.environ.setdefault("CACHE_FILE", str(_TEST_DATA / "local_storage.json"))
os.environ["BLOG_BACKEND"] = "json"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from digiblog.database import create_tables  # noqa: E402
from digiblog.dependencies import get_blog_repository  # noqa: E402
from digiblog.main import app  # noqa: E402
from digiblog.models import blog  # noqa: E402,F401 - ensure metadata is populated
from digiblog.security.rate_limit import limiter  # noqa: E402
from digiblog.services.blog_repository import (  # noqa: E402
    JsonFileBlogRepository,
    SqlBlogRepository,
)

# Disable rate limiting in tests to prevent cross-test 429 flakes
limiter.enabled = False


class TickingClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current

@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def json_repo(tmp_path, clock) -> JsonFileBlogRepository:
    return JsonFileBlogRepository(tmp_path / "blogs.json", clock=clock)


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sql_repo(db_session, clock) -> SqlBlogRepository:
    return SqlBlogRepository(db_session, clock=clock)


@pytest.fixture(params=["json", "sql"])
def repo(request):
    """Each repository backend in turn."""
    return request.getfixturevalue(f"{request.param}_repo")


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_blog_repository] = lambda: repo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_blog_repository, None)
