"""Rules shared by every write path: derived stats, slugs and timestamps.

The server repositories and the offline fallback in the sync client both go
through these helpers so a blog's ``word_count``/``reading_time`` always match
its ``content`` no matter where it was written.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from digiblog.errors import BlogValidationError, ConflictError
from digiblog.schemas.blog import Blog, BlogCreate
from digiblog.services.text_stats import (
    compute_stats,
    excerpt,
    generate_blog_id,
    generate_slug,
)

IMMUTABLE_FIELDS = frozenset({"id", "created_at"})
DERIVED_FIELDS = frozenset({"word_count", "reading_time"})
NULLABLE_FIELDS = frozenset({"thumbnail"})


def utcnow() -> datetime:
    return datetime.now(UTC)


def resolve_slug(title: str, slug: str | None = None) -> str:
    """Normalize an explicit slug, or derive one from the title."""
    candidate = generate_slug(slug or title)
    if not candidate:
        raise BlogValidationError("A URL slug could not be derived from the title")
    return candidate


def ensure_unique_slug(
    slug: str, blogs: Iterable[Blog], exclude_id: str | None = None
) -> None:
    """Raise ConflictError when another blog already owns ``slug``."""
    for blog in blogs:
        if blog.slug == slug and blog.id != exclude_id:
            raise ConflictError()


def build_blog(
    payload: BlogCreate, *, now: datetime, blog_id: str | None = None
) -> Blog:
    """Turn creator input into a complete Blog with id, slug and stats."""
    stats = compute_stats(payload.content)
    return Blog(
        id=blog_id or generate_blog_id(),
        slug=resolve_slug(payload.title, payload.slug),
        title=payload.title,
        subtitle=payload.subtitle,
        content=payload.content,
        author=payload.author,
        category=payload.category,
        tags=list(payload.tags),
        thumbnail=payload.thumbnail,
        meta_title=payload.meta_title or payload.title,
        meta_description=payload.meta_description
        or payload.subtitle
        or excerpt(payload.content),
        status=payload.status,
        word_count=stats.word_count,
        reading_time=stats.reading_time,
        created_at=now,
        updated_at=now,
    )


def merge_fields(blog: Blog, changes: Mapping[str, Any], *, now: datetime) -> Blog:
    """Overlay ``changes`` on ``blog`` and stamp ``updated_at``.

    No fields are derived here; ``id`` and ``created_at`` never change and a
    ``None`` only clears nullable fields.
    """
    data = blog.model_dump()
    for key, value in changes.items():
        if key in IMMUTABLE_FIELDS:
            continue
        if value is None and key not in NULLABLE_FIELDS:
            continue
        data[key] = value
    data["updated_at"] = now
    return Blog.model_validate(data)


def apply_update(blog: Blog, changes: Mapping[str, Any], *, now: datetime) -> Blog:
    """Merge a partial update, recomputing stats when content is supplied."""
    updates = {k: v for k, v in changes.items() if k not in DERIVED_FIELDS}
    if updates.get("slug") is not None:
        updates["slug"] = resolve_slug(blog.title, updates["slug"])
    if updates.get("content") is not None:
        stats = compute_stats(updates["content"])
        updates["word_count"] = stats.word_count
        updates["reading_time"] = stats.reading_time
    return merge_fields(blog, updates, now=now)
