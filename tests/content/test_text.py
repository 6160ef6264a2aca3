"""Tests for slug, word count and reading time helpers."""

from postrank.content.text import generate_slug, reading_time, unique_slug, word_count


class TestGenerateSlug:
    def test_basic(self):
        assert generate_slug("Hello World") == "hello-world"

    def test_strips_punctuation_and_edges(self):
        assert generate_slug("  Hello, World!  ") == "hello-world"

    def test_collapses_hyphens(self):
        assert generate_slug("C++ & Rust -- Tips") == "c-rust-tips"

    def test_keeps_underscores_and_digits(self):
        assert generate_slug("Top_10 Tips 2026") == "top_10-tips-2026"


class TestUniqueSlug:
    def test_free_slug_unchanged(self):
        assert unique_slug("post", set()) == "post"

    def test_first_free_suffix(self):
        assert unique_slug("post", {"post", "post-1"}) == "post-2"


class TestCounts:
    def test_word_count_ignores_extra_whitespace(self):
        assert word_count("  one  two\nthree ") == 3

    def test_empty_content(self):
        assert word_count("") == 0
        assert reading_time("") == 0

    def test_reading_time_rounds_up(self):
        assert reading_time("word " * 200) == 1
        assert reading_time("word " * 201) == 2
