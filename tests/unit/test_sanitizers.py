"""
Unit Tests for Sanitizers
=========================

Column widths, integer clamping and URL sanitization.
"""

import re

import pytest

from podnorm.utils.sanitizers import (
    INT32_MAX,
    INT32_MIN,
    FieldLimits,
    clamp_int,
    is_http_url,
    parse_enclosure_length,
    parse_optional_int,
    sanitize_url,
    truncate,
)


class TestTruncate:
    """Character-count truncation."""

    def test_short_value_unchanged(self):
        assert truncate("hello", 10) == "hello"

    def test_counts_characters_not_bytes(self):
        value = "é" * 10
        assert truncate(value, 8) == "é" * 8
        assert len(truncate(value, 8).encode("utf-8")) == 16

    def test_none_and_empty(self):
        assert truncate(None, 5) == ""
        assert truncate("", 5) == ""

    def test_language_width(self):
        assert truncate("en-us-variant", FieldLimits.CHANNEL_LANGUAGE) == "en-us-va"


class TestIntegers:
    """Clamping and optional integer parsing."""

    def test_clamp(self):
        assert clamp_int(5) == 5
        assert clamp_int(10**12) == INT32_MAX
        assert clamp_int(-(10**12)) == INT32_MIN

    @pytest.mark.parametrize("raw,expected", [
        ("02", 2),
        (" 7 ", 7),
        ("-3", -3),
        ("99999999999", INT32_MAX),
        ("abc", None),
        ("1.5", None),
        ("", None),
        (None, None),
    ])
    def test_parse_optional_int(self, raw, expected):
        assert parse_optional_int(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("1000", 1000),
        ("-5", 0),
        ("lots", 0),
        ("", 0),
        (None, 0),
        ("99999999999999999999", 0),
    ])
    def test_parse_enclosure_length(self, raw, expected):
        assert parse_enclosure_length(raw) == expected


class TestUrls:
    """URL sanitization and scheme checks."""

    def test_plain_url_unchanged(self):
        url = "https://example.com/ep.mp3?x=1"
        assert sanitize_url(url) == url

    def test_latin1_kept(self):
        assert sanitize_url("https://example.com/café.mp3") == "https://example.com/café.mp3"

    def test_non_latin1_percent_encoded(self):
        assert sanitize_url("https://example.com/€") == "https://example.com/%E2%82%AC"

    def test_trims_whitespace(self):
        assert sanitize_url("  https://example.com/a  ") == "https://example.com/a"

    def test_length_rechecked_after_encoding(self):
        url = "https://example.com/" + "€" * 300
        result = sanitize_url(url, FieldLimits.ENCLOSURE_URL)
        assert len(result) <= FieldLimits.ENCLOSURE_URL
        assert not re.search(r"%[0-9A-Fa-f]?$", result)

    def test_empty(self):
        assert sanitize_url(None) == ""
        assert sanitize_url("") == ""

    @pytest.mark.parametrize("url,expected", [
        ("https://example.com/ep.mp3", True),
        ("HTTP://EXAMPLE.COM/EP.MP3", True),
        ("  http://example.com/a ", True),
        ("ftp://example.com/ep.mp3", False),
        ("/relative/ep.mp3", False),
        ("https://", False),
        ("", False),
        (None, False),
    ])
    def test_is_http_url(self, url, expected):
        assert is_http_url(url) is expected
