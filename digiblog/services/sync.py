"""Reconcile the local blog cache with the server collection.

Reads paint from :class:`LocalCacheStore` first and then fold in the server's
copy; writes go to the API when it is reachable and fall back to a cache-only
write otherwise, reporting which of the two happened.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from digiblog.config import settings
from digiblog.errors import (
    BlogError,
    BlogValidationError,
    ConflictError,
    NotFoundError,
    UpstreamError,
)
from digiblog.schemas.blog import Blog, BlogCreate, BlogStatus, BlogUpdate
from digiblog.services.api_client import BlogApiClient, BlogApiError, BlogApiUnavailable
from digiblog.services.blog_builder import (
    IMMUTABLE_FIELDS,
    apply_update,
    build_blog,
    ensure_unique_slug,
    resolve_slug,
    utcnow,
)
from digiblog.services.blog_views import find_published, published_view, related_blogs
from digiblog.services.local_cache import JsonFileStorage, LocalCacheStore

logger = logging.getLogger(__name__)


def merge(remote: Iterable[Blog], local: Iterable[Blog]) -> list[Blog]:
    """Remote entries win by id; local-only entries follow in their own order."""
    merged = list(remote)
    remote_ids = {blog.id for blog in merged}
    merged.extend(blog for blog in local if blog.id not in remote_ids)
    return merged


@dataclass(slots=True)
class SyncResult:
    blog: Blog | None
    saved_locally: bool
    message: str


class RequestGeneration:
    """Monotonic token marking which in-flight fetch may still write the cache."""

    def __init__(self) -> None:
        self._current = 0

    def begin(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current

    def cancel(self) -> None:
        self._current += 1


def _to_blog_error(error: BlogApiError) -> BlogError:
    message = str(error)
    if error.status_code == 404:
        return NotFoundError(message)
    if error.status_code == 400:
        if message == ConflictError.default_message:
            return ConflictError(message)
        return BlogValidationError(message)
    return UpstreamError(message, status_code=error.status_code)


class SyncReconciler:
    """Offline-first access to the blog collection.

    Args:
        cache: Local mirror of the collection
        api: Client for the server's blog resource
        clock: Source of timestamps for cache-only writes
    """

    def __init__(
        self,
        cache: LocalCacheStore,
        api: BlogApiClient,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.cache = cache
        self.api = api
        self.clock = clock
        self.generation = RequestGeneration()

    # -- reads -------------------------------------------------------------

    async def initialize(self) -> list[Blog]:
        """Seed the cache from the server once per client, then trust the cache."""
        if self.cache.is_initialized():
            return self.cache.get_all()

        token = self.generation.begin()
        try:
            remote = await self.api.list_blogs()
        except BlogApiError:
            logger.warning("Initial blog fetch failed; using local cache")
            self.cache.mark_initialized()
            return self.cache.get_all()

        if not self.generation.is_current(token):
            logger.debug("Discarding stale initial blog fetch")
            return self.cache.get_all()

        self.cache.replace_all(remote)
        self.cache.mark_initialized()
        return remote

    async def refresh(self) -> list[Blog]:
        """Fetch the server collection and merge it over the cache."""
        token = self.generation.begin()
        try:
            remote = await self.api.list_blogs()
        except BlogApiError:
            logger.warning("Blog fetch failed; using local cache")
            return self.cache.get_all()

        if not self.generation.is_current(token):
            logger.debug("Discarding stale blog fetch")
            return self.cache.get_all()

        merged = merge(remote, self.cache.get_all())
        self.cache.replace_all(merged)
        return merged

    def cancel_pending(self) -> None:
        """Make any in-flight fetch resolve without touching the cache."""
        self.generation.cancel()

    def local_blogs(self) -> list[Blog]:
        return self.cache.get_all()

    async def public_blogs(self, category: str | None = None) -> list[Blog]:
        return published_view(await self.refresh(), category=category)

    async def public_blog(self, slug: str) -> tuple[Blog, list[Blog]] | None:
        """Return a published blog and its related posts, or None."""
        blogs = await self.refresh()
        blog = find_published(blogs, slug)
        if blog is None:
            return None
        return blog, related_blogs(blog, blogs)

    # -- writes ------------------------------------------------------------

    def _check_slug(self, slug: str, exclude_id: str | None = None) -> None:
        """Reject a slug already held by a cached blog, synced or not."""
        ensure_unique_slug(slug, self.cache.get_all(), exclude_id=exclude_id)

    async def create(self, payload: BlogCreate) -> SyncResult:
        self._check_slug(resolve_slug(payload.title, payload.slug))
        try:
            blog = await self.api.create_blog(payload)
        except BlogApiUnavailable:
            return self._create_locally(payload)
        except BlogApiError as e:
            raise _to_blog_error(e) from e
        self.cache.upsert(blog)
        return SyncResult(blog, False, "Blog saved successfully")

    def _create_locally(self, payload: BlogCreate) -> SyncResult:
        blog = build_blog(payload, now=self.clock())
        self.cache.add(blog)
        logger.warning("Blog API unavailable; saved %s locally", blog.id)
        return SyncResult(blog, True, "Blog saved locally")

    async def update(self, blog_id: str, changes: BlogUpdate) -> SyncResult:
        if changes.slug:
            self._check_slug(resolve_slug(changes.title or "", changes.slug), blog_id)
        try:
            blog = await self.api.update_blog(blog_id, changes)
        except BlogApiUnavailable:
            return self._update_locally(blog_id, changes)
        except BlogApiError as e:
            if e.status_code == 404 and self._cached(blog_id) is not None:
                return self._update_locally(blog_id, changes)
            raise _to_blog_error(e) from e
        self.cache.upsert(blog)
        return SyncResult(blog, False, "Blog updated successfully")

    def _cached(self, blog_id: str) -> Blog | None:
        for blog in self.cache.get_all():
            if blog.id == blog_id:
                return blog
        return None

    def _update_locally(self, blog_id: str, changes: BlogUpdate) -> SyncResult:
        current = self._cached(blog_id)
        if current is None:
            raise NotFoundError()
        preview = apply_update(current, changes.changes(), now=self.clock())
        if preview.slug != current.slug:
            ensure_unique_slug(preview.slug, self.cache.get_all(), exclude_id=blog_id)
        fields = preview.model_dump(exclude=set(IMMUTABLE_FIELDS) | {"updated_at"})
        blog = self.cache.update(blog_id, fields)
        logger.warning("Blog API unavailable; updated %s locally", blog_id)
        return SyncResult(blog, True, "Blog updated locally")

    async def toggle_status(self, blog_id: str) -> SyncResult:
        """Flip a blog between draft and published."""
        current = self._cached(blog_id)
        if current is None:
            try:
                current = await self.api.get_blog(blog_id)
            except BlogApiError as e:
                raise NotFoundError() from e
        new_status = current.status.toggled()
        result = await self.update(blog_id, BlogUpdate(status=new_status))
        verb = "published" if new_status is BlogStatus.PUBLISHED else "unpublished"
        suffix = " locally" if result.saved_locally else " successfully"
        result.message = f"Blog {verb}{suffix}"
        return result

    async def delete(self, blog_id: str) -> SyncResult:
        """Delete on the server, then drop the cached copy.

        The cache is only touched once the outcome is known, so a refused
        delete leaves both sides holding the blog.
        """
        try:
            await self.api.delete_blog(blog_id)
        except BlogApiUnavailable:
            if not self.cache.remove(blog_id):
                raise NotFoundError()
            logger.warning("Blog API unavailable; deleted %s locally", blog_id)
            return SyncResult(None, True, "Blog deleted locally")
        except BlogApiError as e:
            if e.status_code == 404 and self.cache.remove(blog_id):
                return SyncResult(None, True, "Blog deleted locally")
            raise _to_blog_error(e) from e
        self.cache.remove(blog_id)
        return SyncResult(None, False, "Blog deleted successfully")

    async def close(self) -> None:
        await self.api.close()


def build_reconciler() -> SyncReconciler:
    """Wire a reconciler from settings: file-backed cache plus HTTP client."""
    cache = LocalCacheStore(
        JsonFileStorage(settings.cache_path), namespace=settings.cache_namespace
    )
    return SyncReconciler(cache, BlogApiClient())
