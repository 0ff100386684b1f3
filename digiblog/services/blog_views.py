"""Selections of the blog collection for the public site and the dashboard."""

from __future__ import annotations

from collections.abc import Iterable

from digiblog.constants import RELATED_BLOGS_LIMIT
from digiblog.schemas.blog import Blog, BlogStats, BlogStatus


def newest_first(blogs: Iterable[Blog]) -> list[Blog]:
    return sorted(blogs, key=lambda blog: blog.created_at, reverse=True)


def published_view(blogs: Iterable[Blog], category: str | None = None) -> list[Blog]:
    """Published blogs only, newest first, optionally limited to one category."""
    visible = [blog for blog in blogs if blog.is_published]
    if category and category != "all":
        visible = [blog for blog in visible if blog.category == category]
    return newest_first(visible)


def find_published(blogs: Iterable[Blog], slug: str) -> Blog | None:
    for blog in blogs:
        if blog.slug == slug and blog.is_published:
            return blog
    return None


def related_blogs(
    blog: Blog, blogs: Iterable[Blog], limit: int = RELATED_BLOGS_LIMIT
) -> list[Blog]:
    """Other published blogs sharing the category or at least one tag."""
    tags = set(blog.tags)
    related = [
        other
        for other in blogs
        if other.id != blog.id
        and other.is_published
        and (other.category == blog.category or tags.intersection(other.tags))
    ]
    return related[:limit]


def filter_blogs(
    blogs: Iterable[Blog],
    query: str | None = None,
    status: BlogStatus | None = None,
    category: str | None = None,
) -> list[Blog]:
    """Dashboard filtering by free-text search, status and category."""
    result = list(blogs)
    if query:
        needle = query.lower()
        result = [
            blog
            for blog in result
            if needle in blog.title.lower()
            or needle in blog.author.lower()
            or needle in blog.category.lower()
            or any(needle in tag.lower() for tag in blog.tags)
        ]
    if status is not None:
        result = [blog for blog in result if blog.status is status]
    if category and category != "all":
        result = [blog for blog in result if blog.category == category]
    return result


def categories(blogs: Iterable[Blog]) -> list[str]:
    """Distinct non-empty categories in first-seen order."""
    seen: dict[str, None] = {}
    for blog in blogs:
        if blog.category:
            seen.setdefault(blog.category, None)
    return list(seen)


def blog_stats(blogs: Iterable[Blog]) -> BlogStats:
    blogs = list(blogs)
    published = sum(1 for blog in blogs if blog.is_published)
    return BlogStats(
        total=len(blogs), published=published, drafts=len(blogs) - published
    )
