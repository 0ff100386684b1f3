"""Slug, id and reading-stat helpers for blog content."""

from __future__ import annotations

import math
import re
import secrets
import string
import time
from typing import NamedTuple

from slugify import slugify

from digiblog.constants import META_DESCRIPTION_LENGTH, WORDS_PER_MINUTE

_TAG_PATTERN = re.compile(r"<[^>]*>")
# slugify drops commas between digits ("1,000" -> "1000"); keep them as breaks.
_SLUG_REPLACEMENTS = [[",", "-"]]
_ID_ALPHABET = string.digits + string.ascii_lowercase


class ReadingStats(NamedTuple):
    word_count: int
    reading_time: int


def generate_slug(title: str) -> str:
    """Generate URL-safe slug from title.

    Args:
        title: Blog title (or an explicit slug to normalize)

    Returns:
        Lowercase hyphen-separated slug, empty when nothing alphanumeric remains
    """
    return slugify(title or "", max_length=200, replacements=_SLUG_REPLACEMENTS)


def strip_html(content: str) -> str:
    """Remove markup tags, leaving the text between them."""
    return _TAG_PATTERN.sub("", content or "")


def compute_stats(content: str) -> ReadingStats:
    """Count words in HTML content and estimate reading time in minutes.

    Args:
        content: HTML produced by the editor

    Returns:
        ReadingStats with a reading time of at least one minute
    """
    word_count = len(strip_html(content).split())
    # Average reading speed: 200 words per minute
    reading_time = max(1, math.ceil(word_count / WORDS_PER_MINUTE))
    return ReadingStats(word_count, reading_time)


def excerpt(content: str, length: int = META_DESCRIPTION_LENGTH) -> str:
    """Collapse the plain text of ``content`` and cut it to ``length`` chars."""
    text = " ".join(strip_html(content).split())
    return text[:length].rstrip()


def generate_blog_id() -> str:
    """Return an opaque id of the form ``blog-<epoch ms>-<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"blog-{time.time_ns() // 1_000_000}-{suffix}"
