"""Content domain models: pure Pydantic v2 data types.

These models represent a blog post through its lifecycle: from draft,
through publication, to archival.  Every post is a ContentRecord; the
filter, request and summary models describe how the store and the
search layer talk about posts.  No I/O lives here.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from postrank.shared.clock import ensure_utc
from pydantic import BaseModel, Field, field_validator

# Fields that load as "" when a stored record is missing them or holds null.
_TEXT_FIELDS = ("title", "slug", "content", "excerpt", "author", "category")
_COUNT_FIELDS = ("view_count", "like_count", "comment_count", "word_count", "reading_time")
_DATE_FIELDS = (
    "created_at",
    "updated_at",
    "published_at",
    "scheduled_publish_at",
    "last_viewed_at",
)


class ContentStatus(StrEnum):
    """Lifecycle status of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class SortField(StrEnum):
    """Fields the store can order listings by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    PUBLISHED_AT = "published_at"
    VIEW_COUNT = "view_count"
    LIKE_COUNT = "like_count"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class ContentRecord(BaseModel):
    """A single blog post, the unit that is searched and ranked.

    Text fields default to empty strings and counters to zero, so a
    partially written record still validates and scores as if the
    missing parts were empty.
    """

    id: str
    title: str = ""
    slug: str = ""
    content: str = ""
    excerpt: str = ""
    author: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)

    status: ContentStatus = ContentStatus.DRAFT
    published: bool = False
    created_at: datetime
    updated_at: datetime | None = None
    published_at: datetime | None = None
    scheduled_publish_at: datetime | None = None
    last_viewed_at: datetime | None = None

    view_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    word_count: int = 0
    reading_time: int = 0

    series: str | None = None
    series_order: int | None = None
    related_posts: list[str] = Field(default_factory=list)

    featured_image: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    canonical_url: str | None = None
    no_index: bool = False
    social_title: str | None = None
    social_description: str | None = None
    social_image: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _none_text_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(*_COUNT_FIELDS, mode="before")
    @classmethod
    def _none_count_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("tags", "related_posts", mode="before")
    @classmethod
    def _none_list_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator(*_DATE_FIELDS)
    @classmethod
    def _dates_in_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @property
    def effective_date(self) -> datetime:
        """Publication time if published, otherwise creation time."""
        return self.published_at or self.created_at


class PostFilters(BaseModel):
    """Non-text filtering, sorting and pagination options for listings."""

    published: bool | None = None
    status: ContentStatus | None = None
    author: str | None = None
    category: str | None = None
    tag: str | None = None
    series: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    min_views: int | None = None
    exclude_ids: list[str] = Field(default_factory=list)
    search: str | None = None  # plain substring match, not scored
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)

    @field_validator("date_from", "date_to")
    @classmethod
    def _dates_in_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class CreatePostRequest(BaseModel):
    """Fields accepted when creating a post."""

    title: str = Field(min_length=1)
    content: str
    excerpt: str = ""
    author: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    status: ContentStatus = ContentStatus.DRAFT
    scheduled_publish_at: datetime | None = None
    series: str | None = None
    series_order: int | None = None
    related_posts: list[str] = Field(default_factory=list)
    featured_image: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    canonical_url: str | None = None
    no_index: bool = False
    social_title: str | None = None
    social_description: str | None = None
    social_image: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("scheduled_publish_at")
    @classmethod
    def _schedule_in_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class UpdatePostRequest(BaseModel):
    """Partial update; only fields that were explicitly set are applied."""

    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    excerpt: str | None = None
    author: str | None = None
    published: bool | None = None
    tags: list[str] | None = None
    category: str | None = None
    status: ContentStatus | None = None
    scheduled_publish_at: datetime | None = None
    series: str | None = None
    series_order: int | None = None
    related_posts: list[str] | None = None
    featured_image: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    canonical_url: str | None = None
    no_index: bool | None = None
    social_title: str | None = None
    social_description: str | None = None
    social_image: str | None = None
    custom_fields: dict[str, Any] | None = None

    @field_validator("scheduled_publish_at")
    @classmethod
    def _schedule_in_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class PostStats(BaseModel):
    """Aggregate counts across the whole store."""

    total: int = 0
    published: int = 0
    drafts: int = 0
    archived: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    average_reading_time: int = 0


class BulkResult(BaseModel):
    """Outcome of a bulk store operation."""

    processed: int = 0
    failed: list[str] = Field(default_factory=list)


class RelatedValidation(BaseModel):
    """Curated related IDs split by whether they exist in the store."""

    valid: list[str] = Field(default_factory=list)
    invalid: list[str] = Field(default_factory=list)
