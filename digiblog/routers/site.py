"""Public blog pages and the management dashboard, served as JSON views."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request

from digiblog.dependencies import get_blog_repository
from digiblog.errors import BlogValidationError, NotFoundError
from digiblog.schemas.blog import (
    BlogDetailResponse,
    BlogResponse,
    BlogStatus,
    BlogUpdate,
    ManageListResponse,
    PublicListResponse,
)
from digiblog.security import limiter
from digiblog.services.blog_repository import BlogRepository
from digiblog.services.blog_views import (
    blog_stats,
    categories,
    filter_blogs,
    find_published,
    published_view,
    related_blogs,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["site"])


@router.get("/blog", response_model=PublicListResponse, name="blog_index")
@limiter.limit("60/minute")
def blog_index(
    request: Request,
    category: str | None = Query(None),
    repo: BlogRepository = Depends(get_blog_repository),
):
    """Published blogs, newest first, with the categories they cover."""
    published = published_view(repo.list_all())
    return PublicListResponse(
        blogs=published_view(published, category=category),
        categories=categories(published),
    )


@router.get("/blog/{slug}", response_model=BlogDetailResponse, name="blog_detail")
@limiter.limit("60/minute")
def blog_detail(
    request: Request,
    slug: str,
    repo: BlogRepository = Depends(get_blog_repository),
):
    """Single published blog; drafts and unknown slugs are not found."""
    blogs = repo.list_all()
    blog = find_published(blogs, slug)
    if blog is None:
        logger.info("Public blog not found: %s", slug)
        raise NotFoundError()
    return BlogDetailResponse(blog=blog, related=related_blogs(blog, blogs))


@router.get("/manage/blogs", response_model=ManageListResponse, name="manage_blogs")
@limiter.limit("60/minute")
def manage_blogs(
    request: Request,
    q: str | None = Query(None),
    status: str = Query("all"),
    category: str | None = Query(None),
    repo: BlogRepository = Depends(get_blog_repository),
):
    """Dashboard listing with search, status and category filters."""
    if status == "all":
        status_filter = None
    else:
        try:
            status_filter = BlogStatus(status)
        except ValueError:
            raise BlogValidationError(f"Unknown status filter: {status}") from None

    blogs = repo.list_all()
    return ManageListResponse(
        blogs=filter_blogs(blogs, query=q, status=status_filter, category=category),
        stats=blog_stats(blogs),
        categories=categories(blogs),
    )


@router.post(
    "/manage/blogs/{blog_id}/toggle-status",
    response_model=BlogResponse,
    name="toggle_blog_status",
)
@limiter.limit("30/minute")
def toggle_status(
    request: Request,
    blog_id: str,
    repo: BlogRepository = Depends(get_blog_repository),
):
    """Flip a blog between draft and published."""
    current = repo.get(blog_id)
    new_status = current.status.toggled()
    blog = repo.update(current.id, BlogUpdate(status=new_status))
    verb = "published" if new_status is BlogStatus.PUBLISHED else "unpublished"
    return BlogResponse(blog=blog, message=f"Blog {verb} successfully")
