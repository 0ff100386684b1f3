"""JSON resource routes for blog CRUD."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from digiblog.constants import BLOG_CATEGORIES
from digiblog.dependencies import get_blog_repository
from digiblog.errors import NotFoundError
from digiblog.schemas.blog import (
    BlogCreate,
    BlogListResponse,
    BlogResponse,
    BlogUpdate,
    CategoriesResponse,
    DeleteResponse,
    ErrorResponse,
)
from digiblog.security import limiter
from digiblog.services.blog_repository import BlogRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/blogs",
    tags=["blogs"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.get("", response_model=BlogListResponse)
@limiter.limit("120/minute")
def list_blogs(
    request: Request, repo: BlogRepository = Depends(get_blog_repository)
):
    """Every blog, drafts included, newest first."""
    return BlogListResponse(blogs=repo.list_all())


@router.get("/categories", response_model=CategoriesResponse)
def list_categories():
    return CategoriesResponse(categories=list(BLOG_CATEGORIES))


@router.post("", response_model=BlogResponse)
@limiter.limit("30/minute")
def create_blog(
    request: Request,
    payload: BlogCreate,
    repo: BlogRepository = Depends(get_blog_repository),
):
    """Create a blog; the slug comes from the title unless one is supplied."""
    blog = repo.create(payload)
    return BlogResponse(blog=blog)


@router.get("/{id_or_slug}", response_model=BlogResponse)
@limiter.limit("120/minute")
def get_blog(
    request: Request,
    id_or_slug: str,
    repo: BlogRepository = Depends(get_blog_repository),
):
    return BlogResponse(blog=repo.get(id_or_slug))


@router.put("/{blog_id}", response_model=BlogResponse)
@limiter.limit("30/minute")
def update_blog(
    request: Request,
    blog_id: str,
    changes: BlogUpdate,
    repo: BlogRepository = Depends(get_blog_repository),
):
    """Apply a partial update; stats are recomputed when content changes."""
    return BlogResponse(blog=repo.update(blog_id, changes))


@router.delete("/{blog_id}", response_model=DeleteResponse)
@limiter.limit("30/minute")
def delete_blog(
    request: Request,
    blog_id: str,
    repo: BlogRepository = Depends(get_blog_repository),
):
    if not repo.delete(blog_id):
        logger.warning("Delete requested for unknown blog %s", blog_id)
        raise NotFoundError()
    return DeleteResponse()
