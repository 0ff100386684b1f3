"""Authoritative blog storage behind the HTTP layer.

Two interchangeable backends implement :class:`BlogRepository`:

- :class:`JsonFileBlogRepository` keeps the whole collection in one
  ``{"blogs": [...]}`` document on disk.
- :class:`SqlBlogRepository` keeps one ``blogs`` row per blog through
  SQLAlchemy (SQLite locally, Postgres/Supabase in production).

Both return collections newest-first, enforce slug uniqueness on create and
on slug-changing updates, and recompute derived stats through
:mod:`digiblog.services.blog_builder`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy import desc, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from digiblog.errors import ConflictError, NotFoundError, StorageError
from digiblog.models.blog import BlogRecord
from digiblog.schemas.blog import Blog, BlogCollection, BlogCreate, BlogUpdate
from digiblog.services.blog_builder import (
    apply_update,
    build_blog,
    ensure_unique_slug,
    utcnow,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def record_values(blog: Blog, exclude: set[str] | None = None) -> dict:
    values = blog.model_dump(exclude=exclude)
    if "status" in values:
        values["status"] = blog.status.value
    return values


class BlogRepository(ABC):
    """CRUD contract shared by the storage backends."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self.clock = clock

    @abstractmethod
    def list_all(self) -> list[Blog]: ...

    @abstractmethod
    def get(self, id_or_slug: str) -> Blog:
        """Return the blog whose id or slug matches, else raise NotFoundError."""

    @abstractmethod
    def create(self, payload: BlogCreate) -> Blog: ...

    @abstractmethod
    def update(self, blog_id: str, changes: BlogUpdate) -> Blog: ...

    @abstractmethod
    def delete(self, blog_id: str) -> bool: ...


class JsonFileBlogRepository(BlogRepository):
    """Flat-file backend storing ``{"blogs": [...]}`` as a single document."""

    def __init__(self, path: Path | str, clock: Clock = utcnow) -> None:
        super().__init__(clock)
        self.path = Path(path)

    def _load(self) -> list[Blog]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to read blog file %s", self.path)
            raise StorageError("Failed to read blogs") from exc
        if not raw.strip():
            return []
        try:
            return BlogCollection.model_validate_json(raw).blogs
        except ValidationError as exc:
            logger.exception("Blog file %s is corrupt", self.path)
            raise StorageError("Failed to read blogs") from exc

    def _save(self, blogs: list[Blog]) -> None:
        document = json.dumps(BlogCollection(blogs=blogs).to_json(), indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.exception("Failed to write blog file %s", self.path)
            raise StorageError("Failed to save blogs") from exc

    @staticmethod
    def _index_of(blogs: list[Blog], blog_id: str) -> int:
        for index, blog in enumerate(blogs):
            if blog.id == blog_id:
                return index
        raise NotFoundError()

    def list_all(self) -> list[Blog]:
        return self._load()

    def get(self, id_or_slug: str) -> Blog:
        for blog in self._load():
            if blog.id == id_or_slug or blog.slug == id_or_slug:
                return blog
        raise NotFoundError()

    def create(self, payload: BlogCreate) -> Blog:
        blogs = self._load()
        blog = build_blog(payload, now=self.clock())
        ensure_unique_slug(blog.slug, blogs)
        blogs.insert(0, blog)
        self._save(blogs)
        logger.info("Created blog %s (%s)", blog.id, blog.slug)
        return blog

    def update(self, blog_id: str, changes: BlogUpdate) -> Blog:
        blogs = self._load()
        index = self._index_of(blogs, blog_id)
        updated = apply_update(blogs[index], changes.changes(), now=self.clock())
        if updated.slug != blogs[index].slug:
            ensure_unique_slug(updated.slug, blogs, exclude_id=blog_id)
        blogs[index] = updated
        self._save(blogs)
        logger.info("Updated blog %s", blog_id)
        return updated

    def delete(self, blog_id: str) -> bool:
        blogs = self._load()
        try:
            index = self._index_of(blogs, blog_id)
        except NotFoundError:
            return False
        del blogs[index]
        self._save(blogs)
        logger.info("Deleted blog %s", blog_id)
        return True


class SqlBlogRepository(BlogRepository):
    """Relational backend with one ``blogs`` row per blog."""

    def __init__(self, db: Session, clock: Clock = utcnow) -> None:
        super().__init__(clock)
        self.db = db

    def _find(self, id_or_slug: str) -> BlogRecord | None:
        stmt = select(BlogRecord).where(
            or_(BlogRecord.id == id_or_slug, BlogRecord.slug == id_or_slug)
        )
        return self.db.execute(stmt).scalars().first()

    def _slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        stmt = select(BlogRecord.id).where(BlogRecord.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(BlogRecord.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database %s failed", action)
            raise StorageError(f"Failed to {action} blog") from exc

    def list_all(self) -> list[Blog]:
        try:
            records = (
                self.db.execute(
                    select(BlogRecord).order_by(
                        desc(BlogRecord.created_at), desc(BlogRecord.id)
                    )
                )
                .scalars()
                .all()
            )
        except SQLAlchemyError as exc:
            logger.exception("Database query for blogs failed")
            raise StorageError("Failed to fetch blogs") from exc
        return [Blog.model_validate(record) for record in records]

    def get(self, id_or_slug: str) -> Blog:
        try:
            record = self._find(id_or_slug)
        except SQLAlchemyError as exc:
            logger.exception("Database lookup for blog %s failed", id_or_slug)
            raise StorageError("Failed to fetch blog") from exc
        if record is None:
            raise NotFoundError()
        return Blog.model_validate(record)

    def create(self, payload: BlogCreate) -> Blog:
        blog = build_blog(payload, now=self.clock())
        try:
            taken = self._slug_taken(blog.slug)
        except SQLAlchemyError as exc:
            logger.exception("Database slug check failed")
            raise StorageError("Failed to create blog") from exc
        if taken:
            raise ConflictError()
        self.db.add(BlogRecord(**record_values(blog)))
        self._commit("create")
        logger.info("Created blog %s (%s)", blog.id, blog.slug)
        return blog

    def update(self, blog_id: str, changes: BlogUpdate) -> Blog:
        try:
            record = self.db.get(BlogRecord, blog_id)
        except SQLAlchemyError as exc:
            logger.exception("Database lookup for blog %s failed", blog_id)
            raise StorageError("Failed to update blog") from exc
        if record is None:
            raise NotFoundError()

        current = Blog.model_validate(record)
        updated = apply_update(current, changes.changes(), now=self.clock())
        if updated.slug != current.slug:
            try:
                taken = self._slug_taken(updated.slug, exclude_id=blog_id)
            except SQLAlchemyError as exc:
                logger.exception("Database slug check failed")
                raise StorageError("Failed to update blog") from exc
            if taken:
                raise ConflictError()

        values = record_values(updated, exclude={"id", "created_at"})
        for field, value in values.items():
            setattr(record, field, value)
        self._commit("update")
        logger.info("Updated blog %s", blog_id)
        return updated

    def delete(self, blog_id: str) -> bool:
        try:
            record = self.db.get(BlogRecord, blog_id)
        except SQLAlchemyError as exc:
            logger.exception("Database lookup for blog %s failed", blog_id)
            raise StorageError("Failed to delete blog") from exc
        if record is None:
            return False
        self.db.delete(record)
        self._commit("delete")
        logger.info("Deleted blog %s", blog_id)
        return True


def create_repository(
    backend: str, *, path: Path | str, db: Session | None = None, clock: Clock = utcnow
) -> BlogRepository:
    """Return the backend named by ``backend`` (``json`` or ``database``)."""
    if backend == "database":
        if db is None:
            raise ValueError("The database backend needs a session")
        return SqlBlogRepository(db, clock=clock)
    return JsonFileBlogRepository(path, clock=clock)
