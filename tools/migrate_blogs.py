#!/usr/bin/env python3
"""Copy blogs from the JSON file into the configured database."""

from __future__ import annotations

import argparse
import sys

from digiblog.config import settings
from digiblog.database import session_scope
from digiblog.errors import StorageError
from digiblog.observability.logging import configure_logging
from digiblog.services.blog_migration import migrate_file
from digiblog.services.blog_repository import JsonFileBlogRepository


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--file",
        default=settings.blogs_file,
        help=f"Source blogs file (default: {settings.blogs_file})",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level.upper(), fmt=settings.log_format)
    repo = JsonFileBlogRepository(args.file)
    with session_scope() as db:
        try:
            loaded = migrate_file(repo, db)
        except StorageError as exc:
            print(f"❌ {exc}", file=sys.stderr)
            return 1
    print(f"✅ Imported {loaded} blog(s) into {settings.database_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
