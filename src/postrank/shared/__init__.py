"""Helpers shared across the content and search packages."""
