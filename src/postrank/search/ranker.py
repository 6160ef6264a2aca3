"""Rank a pre-filtered candidate set against a free-text query."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import NamedTuple

from postrank.content.models import ContentRecord
from postrank.search.scoring import RelevanceScorer, effective_date, tokenize

logger = logging.getLogger(__name__)


class ScoredRecord(NamedTuple):
    record: ContentRecord
    score: float


def _sort_key(item: ScoredRecord) -> tuple[float, float, str]:
    # Score desc, then newer effective date, then ID for full determinism.
    return (-item.score, -effective_date(item.record).timestamp(), item.record.id)


def rank_scored(
    query: str,
    candidates: Sequence[ContentRecord],
    limit: int | None = None,
    *,
    now: datetime | None = None,
) -> list[ScoredRecord]:
    """Score, filter, sort and truncate *candidates* for *query*.

    Candidates must already be filtered on every non-text criterion.
    A query with no tokens returns the candidates unchanged, each with a
    score of 0, without a scoring pass.  Otherwise posts scoring 0 are
    dropped, the rest are sorted best first and cut to *limit*.
    """
    tokens = tokenize(query)
    if not tokens:
        return [ScoredRecord(record, 0.0) for record in candidates]

    scorer = RelevanceScorer(tokens, now=now)
    scored = [ScoredRecord(record, scorer.score(record)) for record in candidates]
    relevant = sorted((s for s in scored if s.score > 0), key=_sort_key)

    logger.debug(
        "Ranked %d of %d candidate(s) for tokens %s", len(relevant), len(candidates), tokens
    )
    if limit is not None:
        return relevant[:limit]
    return relevant


def rank(
    query: str,
    candidates: Sequence[ContentRecord],
    limit: int | None = None,
    *,
    now: datetime | None = None,
) -> list[ContentRecord]:
    """Return the candidates matching *query*, best match first."""
    return [item.record for item in rank_scored(query, candidates, limit, now=now)]
