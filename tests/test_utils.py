"""
Tests for the shared helpers in app.core.utils.
"""

from datetime import datetime, timezone

from app.core.utils import (
    POST_SLUG_MAX_LENGTH,
    count_words,
    generate_slug,
    ilike_filter,
    index_by,
    page_range,
    parse_timestamp,
    total_pages,
)


class TestGenerateSlug:
    def test_lowercases_and_hyphenates(self):
        assert generate_slug("Hello World") == "hello-world"

    def test_drops_punctuation(self):
        assert generate_slug("What's new, in 2024?!") == "whats-new-in-2024"

    def test_collapses_repeated_hyphens_and_trims(self):
        assert generate_slug("  --Learn   -- Python--  ") == "learn-python"

    def test_truncates_to_max_length(self):
        slug = generate_slug("a" * 300, max_length=POST_SLUG_MAX_LENGTH)
        assert len(slug) == POST_SLUG_MAX_LENGTH

    def test_default_length_is_category_limit(self):
        assert len(generate_slug("word " * 40)) <= 50

    def test_punctuation_only_gives_empty_slug(self):
        assert generate_slug("!!!") == ""

    def test_keeps_thai_vowel_and_tone_marks(self):
        assert generate_slug("คณิตศาสตร์") == "คณิตศาสตร์"
        assert generate_slug("ภาษา ไทย!") == "ภาษา-ไทย"

    def test_truncation_does_not_end_with_hyphen(self):
        assert generate_slug("ab cd", max_length=3) == "ab"


class TestPagination:
    def test_first_page(self):
        assert page_range(1, 20) == (0, 19)

    def test_later_page(self):
        assert page_range(3, 12) == (24, 35)

    def test_page_below_one_is_clamped(self):
        assert page_range(0, 10) == (0, 9)

    def test_non_positive_page_size_is_clamped(self):
        assert page_range(1, 0) == (0, 0)
        assert page_range(2, -5) == (1, 1)

    def test_total_pages_rounds_up(self):
        assert total_pages(41, 20) == 3
        assert total_pages(40, 20) == 2
        assert total_pages(0, 20) == 0


class TestParseTimestamp:
    def test_z_suffix(self):
        parsed = parse_timestamp("2024-03-01T10:00:00Z")
        assert parsed == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_naive_is_assumed_utc(self):
        assert parse_timestamp("2024-03-01T10:00:00").tzinfo == timezone.utc

    def test_datetime_passthrough(self):
        value = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(value) is value


class TestMisc:
    def test_count_words(self):
        assert count_words("one two  three\nfour") == 4
        assert count_words("") == 0

    def test_index_by_skips_rows_without_key(self):
        rows = [{"id": "a", "n": 1}, {"n": 2}, {"id": "b", "n": 3}]
        assert set(index_by(rows)) == {"a", "b"}

    def test_ilike_filter_strips_filter_syntax(self):
        result = ilike_filter(["title", "description"], "math, (algebra)%")
        assert result == "title.ilike.%math   algebra%,description.ilike.%math   algebra%"
