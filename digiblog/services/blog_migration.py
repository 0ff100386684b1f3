"""Copy blogs from the flat-file backend into the relational one."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from digiblog.models.blog import BlogRecord
from digiblog.schemas.blog import Blog
from digiblog.services.blog_repository import JsonFileBlogRepository, record_values

logger = logging.getLogger(__name__)


def import_blogs(blogs: Iterable[Blog], db: Session) -> int:
    """Insert blogs as-is, keeping ids, timestamps and stats.

    Args:
        blogs: Blogs read from the flat file
        db: Database session

    Returns:
        Number of blogs inserted; ids or slugs already present are skipped
    """
    loaded = 0
    for blog in blogs:
        existing = db.execute(
            select(BlogRecord.id).where(
                or_(BlogRecord.id == blog.id, BlogRecord.slug == blog.slug)
            )
        ).first()
        if existing:
            logger.info("Skipping %s - slug '%s' already exists", blog.id, blog.slug)
            continue
        db.add(BlogRecord(**record_values(blog)))
        # Flush per row so a duplicate slug later in the file is seen above.
        db.flush()
        loaded += 1
    db.commit()
    return loaded


def migrate_file(repo: JsonFileBlogRepository, db: Session) -> int:
    """Import every blog stored in ``repo``'s file, oldest first."""
    return import_blogs(reversed(repo.list_all()), db)
