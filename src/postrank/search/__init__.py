"""Search domain: relevance ranking and related-post recommendations.

Matching is literal and case-insensitive; there is no index.  Callers
filter candidates first (usually through ``PostStore.list``) and rank
them here.
"""

from postrank.search.ranker import ScoredRecord, rank, rank_scored
from postrank.search.related import related_to, similarity_score
from postrank.search.scoring import RelevanceScorer, tokenize
from postrank.search.service import SearchService

__all__ = [
    "RelevanceScorer",
    "ScoredRecord",
    "SearchService",
    "rank",
    "rank_scored",
    "related_to",
    "similarity_score",
    "tokenize",
]
