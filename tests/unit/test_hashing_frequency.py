"""
Unit Tests for Change Hashing and Update Frequency
==================================================
"""

import hashlib

import pytest

from podnorm.engine.frequency import count_within, update_frequency
from podnorm.engine.hashing import ContentHasher, channel_content_hash, item_hash_fields

NOW = 1704067200
DAY = 86_400


class TestContentHasher:
    """Incremental md5 over ordered fields."""

    def test_fields_concatenated_trimmed(self):
        hasher = ContentHasher()
        hasher.fold(" a ", "b", None, "c")
        assert hasher.hexdigest() == hashlib.md5(b"abc").hexdigest()
        assert hasher.fields_folded == 4

    def test_empty_digest(self):
        assert ContentHasher().hexdigest() == hashlib.md5(b"").hexdigest()

    def test_item_fields_order(self):
        fields = item_hash_fields("T", "L", "U", "audio/mpeg", "F", "FT")
        assert fields == ("T", "L", "U", "audio/mpeg", "F", "FT")


class TestChannelContentHash:
    """Determinism and sensitivity of the channel hash."""

    FIELDS = ("Show", "https://example.com", "en", "gen", "Author", "Owner", "o@example.com")

    def test_deterministic(self):
        assert channel_content_hash(*self.FIELDS) == channel_content_hash(*self.FIELDS)

    @pytest.mark.parametrize("index", range(7))
    def test_each_field_changes_digest(self, index):
        changed = list(self.FIELDS)
        changed[index] = changed[index] + "x"
        assert channel_content_hash(*changed) != channel_content_hash(*self.FIELDS)


class TestUpdateFrequency:
    """Cadence classes from item publish times."""

    def test_no_items_is_dormant(self):
        assert update_frequency([], NOW) == 9

    def test_two_items_one_day_apart(self):
        assert update_frequency([NOW - DAY, NOW - 2 * DAY], NOW) == 1

    @pytest.mark.parametrize("age_days,expected", [
        (8, 2),
        (15, 3),
        (30, 4),
        (90, 5),
    ])
    def test_busy_windows(self, age_days, expected):
        pubdates = [NOW - age_days * DAY, NOW - age_days * DAY + 60]
        assert update_frequency(pubdates, NOW) == expected

    def test_two_items_in_200_days(self):
        pubdates = [NOW - 150 * DAY, NOW - 90 * DAY]
        assert update_frequency(pubdates, NOW) == 6

    def test_single_recent_item(self):
        assert update_frequency([NOW - DAY], NOW) == 7

    def test_nothing_in_100_days(self):
        assert update_frequency([NOW - 150 * DAY, NOW - 151 * DAY], NOW) == 7

    def test_nothing_in_200_days(self):
        assert update_frequency([NOW - 300 * DAY], NOW) == 8

    def test_nothing_in_400_days(self):
        assert update_frequency([NOW - 500 * DAY], NOW) == 9

    def test_zero_dates_ignored(self):
        assert update_frequency([0, 0, 0], NOW) == 9

    def test_count_within_inclusive_and_future(self):
        assert count_within([NOW - 5 * DAY, NOW + DAY], NOW, 5) == 2
        assert count_within([NOW - 5 * DAY - 1], NOW, 5) == 0
