"""Related-post recommendations.

Curated relations on the reference post come first.  Any remaining
slots are filled with the candidates most similar to the reference
post, by shared category, tags, author and series plus small recency
and popularity boosts.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from datetime import datetime

from postrank.content.models import ContentRecord
from postrank.search.scoring import (
    RECENCY_POINTS,
    effective_date,
    is_recent,
    popularity_points,
)
from postrank.shared.clock import resolve_now

logger = logging.getLogger(__name__)

SAME_CATEGORY_POINTS = 30
SHARED_TAG_POINTS = 20
SAME_AUTHOR_POINTS = 10
SAME_SERIES_POINTS = 25
POPULARITY_CAP = 10

# The automatic phase scores this many candidates per open slot.
POOL_FACTOR = 3


def similarity_score(
    candidate: ContentRecord, reference: ContentRecord, now: datetime | None = None
) -> float:
    """How closely *candidate* resembles *reference*.

    Category, tag, author and series comparisons are exact.
    """
    now = resolve_now(now)
    score = 0.0

    if candidate.category == reference.category:
        score += SAME_CATEGORY_POINTS

    reference_tags = set(reference.tags)
    score += SHARED_TAG_POINTS * sum(1 for tag in candidate.tags if tag in reference_tags)

    if candidate.author == reference.author:
        score += SAME_AUTHOR_POINTS
    if candidate.series and candidate.series == reference.series:
        score += SAME_SERIES_POINTS
    if is_recent(candidate, now):
        score += RECENCY_POINTS

    score += popularity_points(candidate, POPULARITY_CAP)
    return score


def curated_related(
    record: ContentRecord,
    candidates: Sequence[ContentRecord],
    limit: int,
    known_ids: Collection[str] | None = None,
) -> list[ContentRecord]:
    """Candidates named in ``record.related_posts``, in candidate order.

    IDs missing from *known_ids* are dangling and dropped.
    """
    if not record.related_posts or limit <= 0:
        return []
    known = set(known_ids) if known_ids is not None else {c.id for c in candidates}
    valid = {rid for rid in record.related_posts if rid in known and rid != record.id}
    dangling = [rid for rid in record.related_posts if rid not in known]
    if dangling:
        logger.debug("Post %s has dangling related IDs: %s", record.id, dangling)
    return [c for c in candidates if c.id in valid][:limit]


def related_to(
    record: ContentRecord,
    candidates: Sequence[ContentRecord],
    limit: int,
    *,
    known_ids: Collection[str] | None = None,
    now: datetime | None = None,
) -> list[ContentRecord]:
    """Recommend up to *limit* posts related to *record*.

    Parameters
    ----------
    record:
        The reference post.
    candidates:
        Published posts to choose from, in the store's default order.
        The reference post is skipped if present.
    limit:
        Maximum number of recommendations.
    known_ids:
        Every ID in the store, used to drop dangling curated relations.
        Defaults to the candidate IDs.
    now:
        Evaluation time for the recency boost.

    Returns
    -------
    list[ContentRecord]
        Curated relations first, then the most similar posts.  Never
        contains *record* itself or duplicates.
    """
    if limit <= 0:
        return []

    pool = [c for c in candidates if c.id != record.id]
    curated = curated_related(record, pool, limit, known_ids)
    if len(curated) >= limit:
        return curated

    remaining = limit - len(curated)
    taken = {c.id for c in curated}
    auto_pool = [c for c in pool if c.id not in taken][: remaining * POOL_FACTOR]

    now = resolve_now(now)
    scored = [(similarity_score(c, record, now), c) for c in auto_pool]
    scored.sort(key=lambda pair: (-pair[0], -effective_date(pair[1]).timestamp(), pair[1].id))

    logger.debug(
        "Related to %s: %d curated, %d automatic from a pool of %d",
        record.id,
        len(curated),
        min(remaining, len(scored)),
        len(auto_pool),
    )
    return curated + [c for _, c in scored[:remaining]]
