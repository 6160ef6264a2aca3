"""JSON-backed post store.

Persists all posts in a single JSON file, loaded on init and saved
after every write operation.  Provides CRUD, filtering, sorting and
pagination, engagement counters, scheduled publishing and statistics.
The search layer treats this store as its source of candidate sets.
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from postrank.content.models import (
    BulkResult,
    ContentRecord,
    ContentStatus,
    CreatePostRequest,
    PostFilters,
    PostStats,
    RelatedValidation,
    SortField,
    SortOrder,
    UpdatePostRequest,
)
from postrank.content.text import generate_slug, reading_time, unique_slug, word_count
from postrank.errors import StoreError
from postrank.shared.clock import resolve_now
from pydantic import BaseModel, Field
from pydantic import ValidationError as RecordValidationError

logger = logging.getLogger(__name__)

STORE_FILENAME = "posts.json"
DEFAULT_CATEGORY = "Uncategorized"

# Alias to avoid shadowing by PostStore.list method
_list = list

_SORT_KEYS: dict[SortField, Callable[[ContentRecord], Any]] = {
    SortField.CREATED_AT: lambda r: r.created_at,
    SortField.UPDATED_AT: lambda r: r.updated_at or r.created_at,
    SortField.PUBLISHED_AT: lambda r: r.effective_date,
    SortField.VIEW_COUNT: lambda r: r.view_count,
    SortField.LIKE_COUNT: lambda r: r.like_count,
}


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    records: list[ContentRecord] = Field(default_factory=list)
    # Raw entries that failed validation, written back untouched on save
    rejected: list[Any] = Field(default_factory=list, exclude=True)


class PostStore:
    """JSON-backed CRUD store for blog posts.

    Loads the store file on init and saves after every mutation.
    Lookups by unknown ID return ``None`` or ``False`` rather than
    raising.  Entries that fail validation on load are skipped and
    written back verbatim on every save.
    """

    def __init__(self, data_dir: Path) -> None:
        self._path = Path(data_dir) / STORE_FILENAME
        self._data = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Corrupt post store at %s, starting fresh", self._path)
            return _StoreData()
        entries = raw.get("records") if isinstance(raw, dict) else None
        if not isinstance(entries, _list):
            logger.warning("Post store at %s has no record list, starting fresh", self._path)
            return _StoreData()

        data = _StoreData()
        for entry in entries:
            try:
                data.records.append(ContentRecord.model_validate(entry))
            except RecordValidationError as exc:
                record_id = entry.get("id") if isinstance(entry, dict) else None
                logger.warning(
                    "Skipping malformed post %s in %s (%d validation errors)",
                    record_id or "<no id>",
                    self._path,
                    exc.error_count(),
                )
                data.rejected.append(entry)
        return data

    def _save(self) -> None:
        payload = self._data.model_dump(mode="json")
        payload["records"].extend(self._data.rejected)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StoreError(f"Cannot write post store {self._path}: {exc}") from exc

    def _find(self, record_id: str) -> ContentRecord | None:
        for record in self._data.records:
            if record.id == record_id:
                return record
        return None

    def _slugs_taken(self, exclude_id: str | None = None) -> set[str]:
        return {r.slug for r in self._data.records if r.id != exclude_id}

    def _apply_update(
        self, record: ContentRecord, request: UpdatePostRequest, now: datetime
    ) -> ContentRecord:
        changes = request.model_dump(exclude_unset=True)

        status = request.status or record.status
        published = request.published if request.published is not None else record.published
        published_at = record.published_at

        if status == ContentStatus.PUBLISHED:
            published = True
            published_at = published_at or now

        schedule = request.scheduled_publish_at
        if schedule is not None and schedule <= now and status == ContentStatus.PUBLISHED:
            published_at = schedule
        if published and published_at is None:
            published_at = now

        # Status and the published flag were reconciled above.
        changes.pop("published", None)
        changes.pop("status", None)
        updated = record.model_copy(update=changes)
        updated = ContentRecord.model_validate(updated.model_dump())

        if request.title is not None:
            updated.slug = unique_slug(
                generate_slug(request.title), self._slugs_taken(exclude_id=record.id)
            )
        if request.content is not None:
            updated.reading_time = reading_time(request.content)
            updated.word_count = word_count(request.content)

        updated.status = status
        updated.published = published
        updated.published_at = published_at
        updated.updated_at = now
        return updated

    # ── Write operations ─────────────────────────────────────────

    def create(self, request: CreatePostRequest, now: datetime | None = None) -> ContentRecord:
        """Create a post from *request* and persist it.

        The post is published immediately only when its status is
        ``published`` and no future schedule holds it back.
        """
        now = resolve_now(now)
        schedule = request.scheduled_publish_at
        should_publish = request.status == ContentStatus.PUBLISHED and (
            schedule is None or schedule <= now
        )

        fields = request.model_dump()
        fields["category"] = request.category or DEFAULT_CATEGORY
        record = ContentRecord(
            **fields,
            id=uuid.uuid4().hex,
            slug=unique_slug(generate_slug(request.title), self._slugs_taken()),
            published=should_publish,
            published_at=(schedule or now) if should_publish else None,
            created_at=now,
            updated_at=now,
            reading_time=reading_time(request.content),
            word_count=word_count(request.content),
        )
        self._data.records.append(record)
        self._save()
        logger.info("Created post %s (%s)", record.id, record.slug)
        return record

    def add(self, record: ContentRecord) -> None:
        """Insert or replace a fully formed record by ID."""
        self._data.records = [r for r in self._data.records if r.id != record.id]
        self._data.records.append(record)
        self._save()

    def update(
        self, record_id: str, request: UpdatePostRequest, now: datetime | None = None
    ) -> ContentRecord | None:
        """Apply a partial update.  Returns ``None`` for an unknown ID.

        A new title regenerates the slug.  Setting the status to
        published forces the published flag on and fills in the
        publication time.
        """
        now = resolve_now(now)
        for index, record in enumerate(self._data.records):
            if record.id == record_id:
                updated = self._apply_update(record, request, now)
                self._data.records[index] = updated
                self._save()
                logger.info("Updated post %s", record_id)
                return updated
        return None

    def delete(self, record_id: str) -> bool:
        """Remove a post.  Returns ``False`` if it did not exist."""
        before = len(self._data.records)
        self._data.records = [r for r in self._data.records if r.id != record_id]
        if len(self._data.records) == before:
            return False
        self._save()
        logger.info("Deleted post %s", record_id)
        return True

    def bulk_delete(self, record_ids: Iterable[str]) -> BulkResult:
        wanted = _list(dict.fromkeys(record_ids))
        existing = {r.id for r in self._data.records}
        self._data.records = [r for r in self._data.records if r.id not in wanted]
        self._save()
        failed = [rid for rid in wanted if rid not in existing]
        return BulkResult(processed=len(wanted) - len(failed), failed=failed)

    def bulk_update(
        self,
        record_ids: Iterable[str],
        request: UpdatePostRequest,
        now: datetime | None = None,
    ) -> BulkResult:
        result = BulkResult()
        for record_id in dict.fromkeys(record_ids):
            if self.update(record_id, request, now=now) is None:
                result.failed.append(record_id)
            else:
                result.processed += 1
        return result

    def bulk_publish(
        self, record_ids: Iterable[str], publish: bool, now: datetime | None = None
    ) -> BulkResult:
        """Publish or unpublish several posts at once."""
        request = UpdatePostRequest(
            published=publish,
            status=ContentStatus.PUBLISHED if publish else ContentStatus.DRAFT,
        )
        return self.bulk_update(record_ids, request, now=now)

    def _increment(self, record_id: str, field: str) -> ContentRecord | None:
        record = self._find(record_id)
        if record is not None:
            setattr(record, field, getattr(record, field) + 1)
        return record

    def increment_view_count(self, record_id: str, now: datetime | None = None) -> bool:
        """Count one view and remember when it happened."""
        record = self._increment(record_id, "view_count")
        if record is None:
            return False
        record.last_viewed_at = resolve_now(now)
        self._save()
        return True

    def increment_like_count(self, record_id: str) -> bool:
        if self._increment(record_id, "like_count") is None:
            return False
        self._save()
        return True

    def increment_comment_count(self, record_id: str) -> bool:
        if self._increment(record_id, "comment_count") is None:
            return False
        self._save()
        return True

    def publish_scheduled(self, now: datetime | None = None) -> BulkResult:
        """Publish posts whose schedule has come due.

        Only posts with status ``published`` that are not yet live and
        whose ``scheduled_publish_at`` is in the past are touched.
        """
        now = resolve_now(now)
        result = BulkResult()
        for record in self._data.records:
            if (
                record.status == ContentStatus.PUBLISHED
                and not record.published
                and record.scheduled_publish_at is not None
                and record.scheduled_publish_at <= now
            ):
                record.published = True
                record.published_at = record.scheduled_publish_at
                record.updated_at = now
                result.processed += 1
        if result.processed:
            self._save()
            logger.info("Published %d scheduled post(s)", result.processed)
        return result

    # ── Read operations ──────────────────────────────────────────

    def get(self, record_id: str) -> ContentRecord | None:
        """Return a post by ID, or None if not found."""
        return self._find(record_id)

    def get_by_slug(self, slug: str) -> ContentRecord | None:
        for record in self._data.records:
            if record.slug == slug:
                return record
        return None

    def exists(self, record_id: str) -> bool:
        return self._find(record_id) is not None

    def ids(self) -> set[str]:
        return {r.id for r in self._data.records}

    def list(self, filters: PostFilters | None = None) -> _list[ContentRecord]:
        """Return posts matching *filters*, sorted and paginated.

        Text filters are case-insensitive: author, tag and series match
        partially, category matches exactly.  The ``search`` key is a
        plain substring test over the text fields and does no scoring.
        """
        f = filters or PostFilters()
        results = _list(self._data.records)

        if f.published is not None:
            results = [r for r in results if r.published == f.published]
        if f.status is not None:
            results = [r for r in results if r.status == f.status]
        if f.author:
            needle = f.author.lower()
            results = [r for r in results if needle in r.author.lower()]
        if f.category:
            needle = f.category.lower()
            results = [r for r in results if r.category.lower() == needle]
        if f.tag:
            needle = f.tag.lower()
            results = [r for r in results if any(needle in t.lower() for t in r.tags)]
        if f.series:
            needle = f.series.lower()
            results = [r for r in results if r.series and needle in r.series.lower()]
        if f.date_from is not None:
            results = [r for r in results if r.created_at >= f.date_from]
        if f.date_to is not None:
            results = [r for r in results if r.created_at <= f.date_to]
        if f.min_views is not None:
            results = [r for r in results if r.view_count >= f.min_views]
        if f.exclude_ids:
            excluded = set(f.exclude_ids)
            results = [r for r in results if r.id not in excluded]
        if f.search:
            needle = f.search.lower()
            results = [r for r in results if _contains_text(r, needle)]

        results.sort(key=_SORT_KEYS[f.sort_by], reverse=f.sort_order == SortOrder.DESC)

        end = f.offset + f.limit if f.limit is not None else None
        return results[f.offset:end]

    def validate_related(self, record_ids: Iterable[str]) -> RelatedValidation:
        """Split curated related IDs into existing and dangling ones."""
        existing = self.ids()
        validation = RelatedValidation()
        for record_id in record_ids:
            if record_id in existing:
                validation.valid.append(record_id)
            else:
                validation.invalid.append(record_id)
        return validation

    def upcoming_scheduled(
        self, hours_ahead: int = 24, now: datetime | None = None
    ) -> _list[ContentRecord]:
        """Return posts due to go live within *hours_ahead*, soonest first."""
        now = resolve_now(now)
        horizon = now + timedelta(hours=hours_ahead)
        upcoming = [
            r
            for r in self._data.records
            if r.status == ContentStatus.PUBLISHED
            and not r.published
            and r.scheduled_publish_at is not None
            and now < r.scheduled_publish_at <= horizon
        ]
        upcoming.sort(key=lambda r: r.scheduled_publish_at)
        return upcoming

    def stats(self) -> PostStats:
        records = self._data.records
        if not records:
            return PostStats()
        return PostStats(
            total=len(records),
            published=sum(1 for r in records if r.status == ContentStatus.PUBLISHED),
            drafts=sum(1 for r in records if r.status == ContentStatus.DRAFT),
            archived=sum(1 for r in records if r.status == ContentStatus.ARCHIVED),
            total_views=sum(r.view_count for r in records),
            total_likes=sum(r.like_count for r in records),
            total_comments=sum(r.comment_count for r in records),
            average_reading_time=math.floor(
                sum(r.reading_time for r in records) / len(records) + 0.5
            ),
        )


def _contains_text(record: ContentRecord, needle: str) -> bool:
    return (
        needle in record.title.lower()
        or needle in record.content.lower()
        or needle in record.excerpt.lower()
        or any(needle in t.lower() for t in record.tags)
        or needle in record.category.lower()
        or needle in record.author.lower()
    )
