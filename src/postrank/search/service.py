"""Search and related-post entry points over a post store.

``SearchService`` is the boundary callers (CLI, HTTP handlers) talk to.
It validates input, pulls candidate sets from the store and hands them
to the ranker or the recommender.
"""

from __future__ import annotations

import logging
from datetime import datetime

from postrank.config import PostrankConfig
from postrank.content.models import ContentRecord, PostFilters
from postrank.content.store import PostStore
from postrank.errors import ValidationError
from postrank.search.ranker import ScoredRecord, rank_scored
from postrank.search.related import related_to
from postrank.search.scoring import tokenize

logger = logging.getLogger(__name__)


class SearchService:
    """Scored search and related-post lookup backed by a ``PostStore``."""

    def __init__(
        self,
        store: PostStore,
        config: PostrankConfig | None = None,
        *,
        now: datetime | None = None,
    ) -> None:
        self._store = store
        self._config = config or PostrankConfig()
        self._now = now

    # -- Public API ----------------------------------------------------------

    def search_scored(self, query: str, filters: PostFilters | None = None) -> list[ScoredRecord]:
        """Like :meth:`search`, keeping each post's relevance score.

        Empty queries are scored 0 and ordered by the store.
        """
        if not isinstance(query, str):
            raise ValidationError("Search query must be a string", field="query")
        filters = filters or PostFilters()

        if not tokenize(query):
            return [ScoredRecord(r, 0.0) for r in self._store.list(filters)]

        # Pagination applies after ranking; the plain substring filter is
        # superseded by scoring.
        candidates = self._store.list(
            filters.model_copy(update={"search": None, "limit": None, "offset": 0})
        )
        limit = filters.limit or self._config.search.default_limit
        results = rank_scored(query, candidates, limit, now=self._now)
        logger.debug("Search %r: %d result(s)", query, len(results))
        return results

    def search(self, query: str, filters: PostFilters | None = None) -> list[ContentRecord]:
        """Return posts matching *query*, best match first.

        An empty or whitespace-only query returns the store's own
        filtered, sorted and paginated listing.
        """
        return [item.record for item in self.search_scored(query, filters)]

    def related_to(self, record_id: str, limit: int | None = None) -> list[ContentRecord]:
        """Recommend published posts related to the post *record_id*.

        Returns an empty list when the post does not exist.

        Raises:
            ValidationError: If *limit* is outside ``1..related.max_limit``.
        """
        if limit is None:
            limit = self._config.related.default_limit
        max_limit = self._config.related.max_limit
        if limit < 1 or limit > max_limit:
            raise ValidationError(f"Limit must be between 1 and {max_limit}", field="limit")

        record = self._store.get(record_id)
        if record is None:
            logger.debug("Related lookup for unknown post %s", record_id)
            return []

        candidates = self._store.list(PostFilters(published=True, exclude_ids=[record_id]))
        return related_to(
            record,
            candidates,
            limit,
            known_ids=self._store.ids(),
            now=self._now,
        )
