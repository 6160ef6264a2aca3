"""Relevance scoring for blog posts against a free-text query.

Every query token contributes weighted points from the title, tags,
category, author, excerpt and body of a post.  Title and category use
ordered tier tables where only the first matching tier counts; the
remaining fields add up independently.  Recency and popularity bonuses
are added once per post, and only to posts that matched at least one
token.

Matching is literal and case-insensitive: no stemming, no fuzziness.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from postrank.content.models import ContentRecord
from postrank.shared.clock import ensure_utc, resolve_now

# (predicate(field, token), points) -- first match wins.
Tier = tuple[Callable[[str, str], bool], int]

TITLE_TIERS: list[Tier] = [
    (lambda field, token: field == token, 100),
    (lambda field, token: field.startswith(token), 50),
    (lambda field, token: token in field, 30),
]

CATEGORY_TIERS: list[Tier] = [
    (lambda field, token: field == token, 20),
    (lambda field, token: token in field, 10),
]

TAG_POINTS = 25
AUTHOR_POINTS = 15
EXCERPT_POINTS = 10
EXCERPT_REPEAT_POINTS = 2
CONTENT_POINTS = 5
CONTENT_REPEAT_CAP = 10

RECENCY_WINDOW = timedelta(days=30)
RECENCY_POINTS = 5
POPULARITY_VIEWS_PER_POINT = 100
POPULARITY_CAP = 5


def tokenize(query: str) -> list[str]:
    """Lowercase *query* and split it on whitespace, dropping empties."""
    return query.lower().split()


def tier_points(tiers: list[Tier], field: str, token: str) -> int:
    """Points of the first tier whose predicate holds, else 0."""
    for predicate, points in tiers:
        if predicate(field, token):
            return points
    return 0


def effective_date(record: ContentRecord) -> datetime:
    """Publication time if set, otherwise creation time, in UTC."""
    return ensure_utc(record.effective_date)


def is_recent(record: ContentRecord, now: datetime, window: timedelta = RECENCY_WINDOW) -> bool:
    return now - effective_date(record) < window


def popularity_points(record: ContentRecord, cap: float) -> float:
    """Linear view-count bonus: one point per 100 views, capped."""
    return min(record.view_count / POPULARITY_VIEWS_PER_POINT, cap)


class SearchableText:
    """Lowercased searchable text of one record."""

    __slots__ = ("title", "category", "author", "excerpt", "content", "tags")

    def __init__(self, record: ContentRecord) -> None:
        self.title = (record.title or "").lower()
        self.category = (record.category or "").lower()
        self.author = (record.author or "").lower()
        self.excerpt = (record.excerpt or "").lower()
        self.content = (record.content or "").lower()
        self.tags = [t.lower() for t in record.tags or [] if t]


def token_score(fields: SearchableText, token: str) -> int:
    """Points earned by one token across all searchable fields."""
    score = tier_points(TITLE_TIERS, fields.title, token)
    score += TAG_POINTS * sum(1 for tag in fields.tags if token in tag)
    score += tier_points(CATEGORY_TIERS, fields.category, token)

    if token in fields.author:
        score += AUTHOR_POINTS

    excerpt_hits = fields.excerpt.count(token)
    if excerpt_hits:
        score += EXCERPT_POINTS + EXCERPT_REPEAT_POINTS * (excerpt_hits - 1)

    content_hits = fields.content.count(token)
    if content_hits:
        score += CONTENT_POINTS + min(content_hits, CONTENT_REPEAT_CAP)

    return score


class RelevanceScorer:
    """Score posts by how well they match a tokenized query.

    The score is the sum of per-token field points; posts with any
    match also receive::

        +5 if the effective date is within 30 days of *now*
        +min(view_count / 100, 5)
    """

    def __init__(self, tokens: list[str], *, now: datetime | None = None) -> None:
        self._tokens = tokens
        self._now = resolve_now(now)

    @property
    def tokens(self) -> list[str]:
        return list(self._tokens)

    def text_score(self, record: ContentRecord) -> int:
        """Token points only, without bonuses."""
        fields = SearchableText(record)
        return sum(token_score(fields, token) for token in self._tokens)

    def score(self, record: ContentRecord) -> float:
        """Full relevance score; 0 when no token matched."""
        text = self.text_score(record)
        if text == 0:
            return 0.0

        total = float(text)
        if is_recent(record, self._now):
            total += RECENCY_POINTS
        total += popularity_points(record, POPULARITY_CAP)
        return total
