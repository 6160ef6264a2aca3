"""Timezone helpers shared by the store and the scorers."""

from __future__ import annotations

from datetime import UTC, datetime


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC if *dt* is timezone-naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def resolve_now(now: datetime | None) -> datetime:
    """Return *now* as an aware datetime, defaulting to the current time."""
    return ensure_utc(now) if now is not None else utcnow()
