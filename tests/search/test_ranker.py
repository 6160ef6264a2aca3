"""Tests for the ranker: exclusion, ordering, truncation, determinism."""

from datetime import UTC, datetime, timedelta

from postrank.content.models import ContentRecord
from postrank.search.ranker import rank, rank_scored

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
OLD = NOW - timedelta(days=365)


def _make_record(record_id: str, created_at: datetime = OLD, **kwargs: object) -> ContentRecord:
    """Helper to build a ContentRecord with sensible defaults."""
    return ContentRecord(id=record_id, created_at=created_at, **kwargs)  # type: ignore[arg-type]


def _ids(records: list[ContentRecord]) -> list[str]:
    return [r.id for r in records]


class TestRankScenarios:
    def test_title_beats_tag_and_non_match_is_dropped(self):
        tutorial = _make_record(
            "js", title="JavaScript Tutorial", content="Learn programming with it"
        )
        guide = _make_record("react", title="React Guide", tags=["react", "javascript"])
        basics = _make_record("py", title="Python Basics", content="Python programming basics")

        results = rank("javascript", [basics, guide, tutorial], now=NOW)

        assert _ids(results) == ["js", "react"]

    def test_equal_scores_prefer_newer_posts(self):
        older = _make_record("a", content="intro to programming")
        newer = _make_record("b", created_at=OLD + timedelta(days=1), content="more programming")

        assert _ids(rank("programming", [older, newer], now=NOW)) == ["b", "a"]

    def test_published_at_is_the_tie_break_date(self):
        early_created = _make_record(
            "a", created_at=OLD - timedelta(days=10), published_at=OLD + timedelta(days=5),
            title="Go",
        )
        late_created = _make_record("b", created_at=OLD + timedelta(days=1), title="Go")

        assert _ids(rank("go", [late_created, early_created], now=NOW)) == ["a", "b"]

    def test_full_ties_fall_back_to_id(self):
        records = [_make_record(rid, title="Same") for rid in ("c", "a", "b")]
        assert _ids(rank("same", records, now=NOW)) == ["a", "b", "c"]


class TestEmptyQuery:
    def test_returns_candidates_unchanged(self):
        records = [_make_record("b"), _make_record("a", title="zzz")]
        assert rank("", records, now=NOW) == records

    def test_whitespace_query_skips_scoring(self):
        records = [_make_record("b"), _make_record("a")]
        scored = rank_scored("   ", records, limit=1, now=NOW)
        assert [s.record.id for s in scored] == ["b", "a"]
        assert all(s.score == 0 for s in scored)


class TestRankProperties:
    def _corpus(self) -> list[ContentRecord]:
        return [
            _make_record("1", title="Python Tips", tags=["python"], view_count=300),
            _make_record("2", title="Advanced Python", content="python python"),
            _make_record("3", title="Rust", excerpt="a python comparison"),
            _make_record("4", title="Cooking"),
            _make_record("5", title="Python", created_at=NOW - timedelta(days=3)),
        ]

    def test_all_results_score_positive(self):
        scored = rank_scored("python", self._corpus(), now=NOW)
        assert scored
        assert all(s.score > 0 for s in scored)
        assert "4" not in {s.record.id for s in scored}

    def test_sorted_by_score_then_date(self):
        scored = rank_scored("python", self._corpus(), now=NOW)
        keys = [(s.score, s.record.effective_date) for s in scored]
        assert keys == sorted(keys, reverse=True)

    def test_output_is_subset_of_input(self):
        corpus = self._corpus()
        results = rank("python tips", corpus, now=NOW)
        assert all(r in corpus for r in results)

    def test_limit_truncates_after_sorting(self):
        full = rank("python", self._corpus(), now=NOW)
        assert rank("python", self._corpus(), limit=2, now=NOW) == full[:2]

    def test_deterministic(self):
        corpus = self._corpus()
        assert rank("python", corpus, now=NOW) == rank("python", corpus, now=NOW)

    def test_more_tag_hits_never_lower_score(self):
        one_tag = _make_record("a", tags=["python"])
        two_tags = _make_record("b", tags=["python", "python3"])
        scored = {s.record.id: s.score for s in rank_scored("python", [one_tag, two_tags], now=NOW)}
        assert scored["b"] > scored["a"]

    def test_candidates_are_not_mutated(self):
        corpus = self._corpus()
        before = [r.model_dump() for r in corpus]
        rank("python", corpus, now=NOW)
        assert [r.model_dump() for r in corpus] == before
