"""Text helpers for posts: URL slugs, word counts and reading time."""

from __future__ import annotations

import math
import re
from collections.abc import Container

WORDS_PER_MINUTE = 200

_NON_SLUG_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """Turn a title into a lowercase, hyphen-separated URL slug."""
    slug = title.lower()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")


def unique_slug(base: str, taken: Container[str]) -> str:
    """Return *base*, or *base* with the first free ``-N`` suffix."""
    slug = base
    counter = 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def word_count(content: str) -> int:
    return len(content.split())


def reading_time(content: str) -> int:
    """Minutes needed to read *content* at 200 words per minute, rounded up."""
    return math.ceil(word_count(content) / WORDS_PER_MINUTE)
