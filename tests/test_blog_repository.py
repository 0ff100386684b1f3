"""Tests for the flat-file and SQL blog repositories."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from digiblog.errors import ConflictError, NotFoundError, StorageError
from digiblog.schemas.blog import BlogCreate, BlogStatus, BlogUpdate
from digiblog.services.blog_repository import (
    JsonFileBlogRepository,
    SqlBlogRepository,
    create_repository,
)
from digiblog.services.text_stats import compute_stats


def make_payload(title: str = "Farming Tips", **fields) -> BlogCreate:
    fields.setdefault("content", "<p>word word word</p>")
    return BlogCreate(title=title, **fields)


class TestRepositoryContract:
    """Behaviour shared by both backends (``repo`` is parametrized)."""

    def test_empty_store_lists_nothing(self, repo):
        assert repo.list_all() == []

    def test_create_then_fetch_by_slug(self, repo):
        content = "<h2>Soil</h2><p>Rotate crops every season for yield</p>"
        created = repo.create(make_payload("Farming Tips", content=content))
        fetched = repo.get("farming-tips")
        stats = compute_stats(content)
        assert fetched.id == created.id
        assert fetched.word_count == stats.word_count
        assert fetched.reading_time == stats.reading_time
        assert fetched.status is BlogStatus.DRAFT

    def test_fetch_by_id(self, repo):
        created = repo.create(make_payload())
        assert repo.get(created.id).slug == "farming-tips"

    def test_missing_blog_not_found(self, repo):
        with pytest.raises(NotFoundError):
            repo.get("nope")

    def test_duplicate_slug_conflicts(self, repo):
        repo.create(make_payload("A", slug="x"))
        with pytest.raises(ConflictError):
            repo.create(make_payload("B", slug="x"))
        assert len(repo.list_all()) == 1

    def test_newest_first(self, repo):
        first = repo.create(make_payload("First"))
        second = repo.create(make_payload("Second"))
        assert [b.id for b in repo.list_all()] == [second.id, first.id]

    def test_empty_update_is_idempotent(self, repo):
        created = repo.create(make_payload(content="<p>one two three four</p>"))
        once = repo.update(created.id, BlogUpdate())
        twice = repo.update(created.id, BlogUpdate())
        assert once.word_count == twice.word_count == created.word_count
        assert once.reading_time == twice.reading_time == created.reading_time
        assert created.updated_at < once.updated_at < twice.updated_at
        assert twice.created_at == created.created_at

    def test_content_update_recomputes_stats(self, repo):
        created = repo.create(make_payload())
        updated = repo.update(
            created.id, BlogUpdate(content=" ".join(["w"] * 401))
        )
        assert updated.word_count == 401
        assert updated.reading_time == 3
        assert repo.get(created.id).word_count == 401

    def test_update_slug_collision_conflicts(self, repo):
        repo.create(make_payload("Taken"))
        other = repo.create(make_payload("Other"))
        with pytest.raises(ConflictError):
            repo.update(other.id, BlogUpdate(slug="taken"))
        assert repo.get(other.id).slug == "other"

    def test_update_slug_is_normalized(self, repo):
        created = repo.create(make_payload())
        updated = repo.update(created.id, BlogUpdate(slug="New Slug Here"))
        assert updated.slug == "new-slug-here"
        assert repo.get("new-slug-here").id == created.id

    def test_update_missing_not_found(self, repo):
        with pytest.raises(NotFoundError):
            repo.update("nope", BlogUpdate(title="x"))

    def test_status_round_trip(self, repo):
        created = repo.create(make_payload())
        repo.update(created.id, BlogUpdate(status=BlogStatus.PUBLISHED))
        assert repo.get(created.id).is_published

    def test_delete(self, repo):
        created = repo.create(make_payload())
        assert repo.delete(created.id) is True
        assert repo.delete(created.id) is False
        assert repo.list_all() == []

    def test_tags_preserve_order_and_duplicates(self, repo):
        created = repo.create(make_payload(tags=["b", "a", "b"]))
        assert repo.get(created.id).tags == ["b", "a", "b"]


class TestJsonFileBlogRepository:
    def test_document_shape(self, json_repo):
        json_repo.create(make_payload())
        text = json_repo.path.read_text(encoding="utf-8")
        assert text.lstrip().startswith('{\n  "blogs"')
        assert '"wordCount": 3' in text

    def test_empty_file_is_empty_collection(self, json_repo):
        json_repo.path.write_text("", encoding="utf-8")
        assert json_repo.list_all() == []

    def test_corrupt_file_raises_storage_error(self, json_repo):
        json_repo.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            json_repo.list_all()

    def test_write_failure_raises_storage_error(self, tmp_path, clock):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        repo = JsonFileBlogRepository(blocker / "blogs.json", clock=clock)
        with pytest.raises(StorageError):
            repo.create(make_payload())

    def test_no_temp_files_left_behind(self, json_repo):
        json_repo.create(make_payload())
        assert [p.name for p in json_repo.path.parent.iterdir()] == ["blogs.json"]


class TestSqlBlogRepository:
    def test_query_failure_raises_storage_error(self, clock):
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        repo = SqlBlogRepository(db, clock=clock)
        with pytest.raises(StorageError):
            repo.list_all()

    def test_commit_failure_rolls_back(self, sql_repo, db_session, monkeypatch):
        def fail():
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        monkeypatch.setattr(db_session, "commit", fail)
        rollback = MagicMock(wraps=db_session.rollback)
        monkeypatch.setattr(db_session, "rollback", rollback)
        with pytest.raises(StorageError):
            sql_repo.create(make_payload())
        rollback.assert_called_once()

    def test_update_slug_check_failure_raises_storage_error(
        self, sql_repo, monkeypatch
    ):
        created = sql_repo.create(make_payload())

        def fail(slug, exclude_id=None):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(sql_repo, "_slug_taken", fail)
        with pytest.raises(StorageError):
            sql_repo.update(created.id, BlogUpdate(slug="renamed"))
        assert sql_repo.get(created.id).slug == "farming-tips"


class TestCreateRepository:
    def test_json_backend(self, tmp_path):
        repo = create_repository("json", path=tmp_path / "b.json")
        assert isinstance(repo, JsonFileBlogRepository)

    def test_database_backend(self, db_session, tmp_path):
        repo = create_repository("database", path=tmp_path / "b.json", db=db_session)
        assert isinstance(repo, SqlBlogRepository)

    def test_database_backend_needs_session(self, tmp_path):
        with pytest.raises(ValueError):
            create_repository("database", path=tmp_path / "b.json")
