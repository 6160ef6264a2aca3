"""postrank: relevance-ranked search and related posts for a blog."""

__version__ = "0.1.0"
