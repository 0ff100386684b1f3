"""FastAPI dependencies wiring the configured blog backend."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from digiblog.config import settings
from digiblog.database import get_db
from digiblog.services.blog_repository import BlogRepository, create_repository


def get_blog_repository(db: Session = Depends(get_db)) -> BlogRepository:
    """Return the repository selected by ``BLOG_BACKEND``."""
    return create_repository(settings.blog_backend, path=settings.blogs_path, db=db)
