"""Exceptions raised at the postrank boundary.

Scoring and ranking never raise for record content; these are only
raised by the service layer and the store.
"""

from __future__ import annotations


class PostrankError(Exception):
    """Base class for all postrank errors."""


class ValidationError(PostrankError):
    """Caller input that the service refuses to act on."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class StoreError(PostrankError):
    """The post store could not be written."""
