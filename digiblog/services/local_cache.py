"""Client-side mirror of the blog collection.

``LocalCacheStore`` persists the full collection under one namespaced key of a
``KeyValueStorage`` so the site can paint from cache before (or without) the
server. It never raises: an unavailable medium, an I/O error or a corrupt blob
all degrade to an empty result.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from digiblog.constants import BLOGS_KEY, DRAFT_KEY, INITIALIZED_KEY
from digiblog.schemas.blog import Blog, BlogCollection
from digiblog.services.blog_builder import merge_fields, utcnow

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """String key/value medium, shaped like a browser's localStorage."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """All keys in one JSON object file, replaced atomically on each write."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle)
        os.replace(tmp_name, self.path)

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class LocalCacheStore:
    """Blog collection cache with add/update/delete/find helpers.

    Args:
        storage: Backing medium, or ``None`` when no client storage exists
        namespace: Prefix for every key this store touches
        clock: Source of ``updated_at`` stamps
    """

    def __init__(
        self,
        storage: KeyValueStorage | None,
        namespace: str = "digicides",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.storage = storage
        self.namespace = namespace
        self.clock = clock

    def _key(self, name: str) -> str:
        return f"{self.namespace}:{name}"

    def _read(self, name: str) -> str | None:
        if self.storage is None:
            return None
        try:
            return self.storage.get(self._key(name))
        except (OSError, ValueError):
            logger.warning("Local storage read failed for %s", name, exc_info=True)
            return None

    def _write(self, name: str, value: str) -> None:
        if self.storage is None:
            return
        try:
            self.storage.set(self._key(name), value)
        except (OSError, ValueError):
            logger.warning("Local storage write failed for %s", name, exc_info=True)

    def _delete(self, name: str) -> None:
        if self.storage is None:
            return
        try:
            self.storage.remove(self._key(name))
        except (OSError, ValueError):
            logger.warning("Local storage remove failed for %s", name, exc_info=True)

    @property
    def available(self) -> bool:
        return self.storage is not None

    def get_all(self) -> list[Blog]:
        raw = self._read(BLOGS_KEY)
        if not raw:
            return []
        try:
            return BlogCollection.model_validate_json(raw).blogs
        except ValidationError:
            logger.warning("Discarding unreadable blog cache")
            return []

    def replace_all(self, blogs: list[Blog]) -> None:
        document = BlogCollection(blogs=list(blogs)).to_json()
        self._write(BLOGS_KEY, json.dumps(document))

    def add(self, blog: Blog) -> Blog:
        """Prepend ``blog`` so the cache stays most-recent-first."""
        if not self.available:
            return blog
        blogs = self.get_all()
        blogs.insert(0, blog)
        self.replace_all(blogs)
        return blog

    def update(self, blog_id: str, changes: Mapping[str, Any]) -> Blog | None:
        """Merge ``changes`` into the cached blog and stamp ``updated_at``.

        Derived stats are not recomputed here; callers changing ``content``
        pass fresh ``word_count``/``reading_time`` alongside it.
        """
        blogs = self.get_all()
        for index, blog in enumerate(blogs):
            if blog.id == blog_id:
                updated = merge_fields(blog, changes, now=self.clock())
                blogs[index] = updated
                self.replace_all(blogs)
                return updated
        return None

    def upsert(self, blog: Blog) -> Blog:
        """Store ``blog`` as-is, replacing any cached copy with the same id."""
        if not self.available:
            return blog
        blogs = self.get_all()
        for index, cached in enumerate(blogs):
            if cached.id == blog.id:
                blogs[index] = blog
                break
        else:
            blogs.insert(0, blog)
        self.replace_all(blogs)
        return blog

    def remove(self, blog_id: str) -> bool:
        blogs = self.get_all()
        remaining = [blog for blog in blogs if blog.id != blog_id]
        if len(remaining) == len(blogs):
            return False
        self.replace_all(remaining)
        return True

    def find_by_id_or_slug(self, key: str) -> Blog | None:
        for blog in self.get_all():
            if blog.id == key or blog.slug == key:
                return blog
        return None

    # -- initialization flag ---------------------------------------------

    def is_initialized(self) -> bool:
        return self._read(INITIALIZED_KEY) == "true"

    def mark_initialized(self) -> None:
        self._write(INITIALIZED_KEY, "true")

    def reset_initialized(self) -> None:
        self._delete(INITIALIZED_KEY)

    # -- editor draft autosave --------------------------------------------

    def save_draft(self, draft: Mapping[str, Any]) -> None:
        self._write(DRAFT_KEY, json.dumps(dict(draft)))

    def load_draft(self) -> dict[str, Any] | None:
        raw = self._read(DRAFT_KEY)
        if not raw:
            return None
        try:
            draft = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable editor draft")
            return None
        return draft if isinstance(draft, dict) else None

    def clear_draft(self) -> None:
        self._delete(DRAFT_KEY)
