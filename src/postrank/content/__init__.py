"""Content domain: blog post models and the JSON-backed post store.

The store is the source of candidate sets for the search package; the
models are shared by both.
"""

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
from postrank.content.store import PostStore

__all__ = [
    "BulkResult",
    "ContentRecord",
    "ContentStatus",
    "CreatePostRequest",
    "PostFilters",
    "PostStats",
    "PostStore",
    "RelatedValidation",
    "SortField",
    "SortOrder",
    "UpdatePostRequest",
]
