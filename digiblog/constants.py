"""Shared blog constants."""

from __future__ import annotations

WORDS_PER_MINUTE = 200
META_DESCRIPTION_LENGTH = 160
RELATED_BLOGS_LIMIT = 3

# Suggested categories offered by the editor; not enforced on write.
BLOG_CATEGORIES: tuple[str, ...] = (
    "Agriculture",
    "Technology",
    "Marketing",
    "Rural Development",
    "Farmer Stories",
    "Industry News",
    "Product Updates",
    "Case Studies",
    "Best Practices",
    "Other",
)

# Client cache keys, prefixed with the configured namespace.
BLOGS_KEY = "blogs"
INITIALIZED_KEY = "initialized"
DRAFT_KEY = "draft"
