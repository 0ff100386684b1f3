"""Tests for blog schemas and write-path rules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from digiblog.errors import BlogValidationError, ConflictError
from digiblog.schemas.blog import Blog, BlogCreate, BlogStatus, BlogUpdate
from digiblog.services.blog_builder import (
    apply_update,
    build_blog,
    ensure_unique_slug,
    merge_fields,
    resolve_slug,
)

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


class TestBlogCreate:
    def test_accepts_camel_case_fields(self):
        payload = BlogCreate.model_validate(
            {"title": "T", "metaTitle": "SEO", "metaDescription": "Desc"}
        )
        assert payload.meta_title == "SEO"
        assert payload.meta_description == "Desc"

    def test_title_required(self):
        with pytest.raises(ValidationError):
            BlogCreate.model_validate({"content": "<p>x</p>"})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            BlogCreate(title="   ")

    def test_tags_from_comma_string(self):
        payload = BlogCreate(title="T", tags="soil, water ,, soil")
        assert payload.tags == ["soil", "water", "soil"]

    def test_defaults(self):
        payload = BlogCreate(title="T")
        assert payload.status is BlogStatus.DRAFT
        assert payload.tags == []
        assert payload.thumbnail is None


class TestBlog:
    def test_serializes_camel_case(self):
        blog = build_blog(BlogCreate(title="Farming Tips"), now=NOW, blog_id="b1")
        data = blog.to_json()
        assert data["wordCount"] == 0
        assert data["readingTime"] == 1
        assert data["createdAt"] == data["updatedAt"]
        assert "word_count" not in data

    def test_naive_timestamps_become_utc(self):
        blog = Blog(
            id="b1",
            slug="s",
            title="t",
            created_at=datetime(2026, 1, 1),
            updated_at=datetime(2026, 1, 1),
        )
        assert blog.created_at.tzinfo is UTC

    def test_status_toggles_both_ways(self):
        assert BlogStatus.DRAFT.toggled() is BlogStatus.PUBLISHED
        assert BlogStatus.PUBLISHED.toggled() is BlogStatus.DRAFT


class TestBuildBlog:
    def test_farming_tips_scenario(self):
        blog = build_blog(
            BlogCreate(title="Farming Tips", content="<p>word word word</p>"),
            now=NOW,
        )
        assert blog.slug == "farming-tips"
        assert blog.word_count == 3
        assert blog.reading_time == 1
        assert blog.status is BlogStatus.DRAFT
        assert blog.created_at == blog.updated_at == NOW
        assert blog.id.startswith("blog-")

    def test_meta_defaults(self):
        blog = build_blog(
            BlogCreate(title="Title", content="<p>" + "y" * 200 + "</p>"), now=NOW
        )
        assert blog.meta_title == "Title"
        assert blog.meta_description == "y" * 160

    def test_meta_description_prefers_subtitle(self):
        blog = build_blog(BlogCreate(title="T", subtitle="Sub"), now=NOW)
        assert blog.meta_description == "Sub"

    def test_explicit_slug_is_normalized(self):
        blog = build_blog(BlogCreate(title="T", slug="My Custom Slug!"), now=NOW)
        assert blog.slug == "my-custom-slug"

    def test_unsluggable_title_rejected(self):
        with pytest.raises(BlogValidationError):
            build_blog(BlogCreate(title="!!!"), now=NOW)


class TestUpdates:
    def _blog(self) -> Blog:
        return build_blog(
            BlogCreate(title="Farming Tips", content="<p>a b c</p>"),
            now=NOW,
            blog_id="b1",
        )

    def test_content_change_recomputes_stats(self):
        later = NOW + timedelta(minutes=5)
        updated = apply_update(
            self._blog(), {"content": " ".join(["w"] * 450)}, now=later
        )
        assert updated.word_count == 450
        assert updated.reading_time == 3
        assert updated.updated_at == later
        assert updated.created_at == NOW

    def test_client_supplied_stats_are_ignored(self):
        updated = apply_update(
            self._blog(), {"word_count": 999, "reading_time": 42}, now=NOW
        )
        assert updated.word_count == 3
        assert updated.reading_time == 1

    def test_id_and_created_at_are_immutable(self):
        updated = merge_fields(
            self._blog(),
            {"id": "other", "created_at": NOW - timedelta(days=1)},
            now=NOW + timedelta(seconds=1),
        )
        assert updated.id == "b1"
        assert updated.created_at == NOW

    def test_none_clears_thumbnail_only(self):
        blog = self._blog().model_copy(update={"thumbnail": "data:image/png;x"})
        updated = merge_fields(blog, {"thumbnail": None, "title": None}, now=NOW)
        assert updated.thumbnail is None
        assert updated.title == "Farming Tips"

    def test_update_changes_only_sent_fields(self):
        changes = BlogUpdate.model_validate({"status": "published"}).changes()
        assert changes == {"status": BlogStatus.PUBLISHED}


class TestSlugRules:
    def test_resolve_slug_prefers_explicit(self):
        assert resolve_slug("Title", "Other") == "other"

    def test_resolve_slug_falls_back_to_title(self):
        assert resolve_slug("Title", "") == "title"

    def test_unique_slug_excludes_self(self):
        blog = build_blog(BlogCreate(title="Taken"), now=NOW, blog_id="b1")
        ensure_unique_slug("taken", [blog], exclude_id="b1")
        with pytest.raises(ConflictError):
            ensure_unique_slug("taken", [blog])
