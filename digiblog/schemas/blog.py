"""Pydantic schemas for blogs."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _split_tags(value):
    """Accept the editor's comma-separated tag string as well as a list."""
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


class BlogStatus(str, Enum):
    """Blog publication status."""

    DRAFT = "draft"
    PUBLISHED = "published"

    def toggled(self) -> BlogStatus:
        if self is BlogStatus.PUBLISHED:
            return BlogStatus.DRAFT
        return BlogStatus.PUBLISHED


class Blog(BaseModel):
    """A stored blog with its derived reading stats."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    slug: str
    title: str
    subtitle: str = ""
    content: str = ""
    author: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    meta_title: str = ""
    meta_description: str = ""
    status: BlogStatus = BlogStatus.DRAFT
    word_count: int = 0
    reading_time: int = 1
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """SQLite hands back naive datetimes; treat them as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def is_published(self) -> bool:
        return self.status is BlogStatus.PUBLISHED

    def to_json(self) -> dict:
        """Serialize with the camelCase field names used on the wire."""
        return self.model_dump(mode="json", by_alias=True)


class BlogCreate(BaseModel):
    """Body for creating a blog; ids, timestamps and stats are server-assigned."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    title: str = Field(..., min_length=1, max_length=300)
    subtitle: str = ""
    slug: str | None = None
    content: str = ""
    author: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    status: BlogStatus = BlogStatus.DRAFT

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return _split_tags(value)


class BlogUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    title: str | None = Field(default=None, min_length=1, max_length=300)
    subtitle: str | None = None
    slug: str | None = None
    content: str | None = None
    author: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    thumbnail: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    status: BlogStatus | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return _split_tags(value)

    def changes(self) -> dict:
        """Return the explicitly supplied fields, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class BlogCollection(BaseModel):
    """Persisted document shape: ``{"blogs": [...]}``."""

    blogs: list[Blog] = Field(default_factory=list)

    def to_json(self) -> dict:
        return {"blogs": [blog.to_json() for blog in self.blogs]}


class BlogStats(BaseModel):
    total: int
    published: int
    drafts: int


class BlogListResponse(BaseModel):
    success: bool = True
    blogs: list[Blog]


class BlogResponse(BaseModel):
    success: bool = True
    blog: Blog
    message: str | None = None


class BlogDetailResponse(BaseModel):
    success: bool = True
    blog: Blog
    related: list[Blog] = Field(default_factory=list)


class PublicListResponse(BaseModel):
    success: bool = True
    blogs: list[Blog]
    categories: list[str]


class ManageListResponse(BaseModel):
    success: bool = True
    blogs: list[Blog]
    stats: BlogStats
    categories: list[str]


class CategoriesResponse(BaseModel):
    success: bool = True
    categories: list[str]


class DeleteResponse(BaseModel):
    success: bool = True
    message: str = "Blog deleted successfully"


class ErrorResponse(BaseModel):
    error: str
