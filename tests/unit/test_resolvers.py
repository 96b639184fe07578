"""
Unit Tests for Field Resolution
===============================

Precedence rules and loose scalar parsing.
"""

import pytest

from podnorm.engine import resolvers
from podnorm.engine.state import ChannelState, ItemState


class TestChannelResolution:
    """Channel-level precedence."""

    def test_description_prefers_itunes_summary(self):
        channel = ChannelState(description="plain", itunes_summary="  summary ")
        assert resolvers.resolve_channel_description(channel) == "summary"

    def test_description_falls_back(self):
        channel = ChannelState(description=" plain ", itunes_summary="   ")
        assert resolvers.resolve_channel_description(channel) == "plain"

    def test_image_prefers_rss_image(self):
        channel = ChannelState(image_url="https://e.com/a.jpg", itunes_image="https://e.com/b.jpg")
        assert resolvers.resolve_channel_image(channel) == "https://e.com/a.jpg"
        channel.image_url = ""
        assert resolvers.resolve_channel_image(channel) == "https://e.com/b.jpg"

    def test_podcast_owner(self):
        channel = ChannelState(locked=1, owner_email="owner@example.com")
        assert resolvers.resolve_podcast_owner(channel) == "owner@example.com"
        channel.locked_owner = "explicit@example.com"
        assert resolvers.resolve_podcast_owner(channel) == "explicit@example.com"

    def test_podcast_owner_unlocked_without_attribute(self):
        channel = ChannelState(locked=0, owner_email="owner@example.com")
        assert resolvers.resolve_podcast_owner(channel) == ""


class TestItemResolution:
    """Item-level precedence."""

    def test_itunes_title_untrimmed(self):
        item = ItemState(title="  Plain  ", itunes_title="Ep ")
        assert resolvers.resolve_item_title(item) == "Ep "

    def test_plain_title_trimmed(self):
        assert resolvers.resolve_item_title(ItemState(title="  Plain  ")) == "Plain"

    def test_description_order(self):
        item = ItemState(
            description="d", content_encoded="ce", itunes_summary="s", content="c"
        )
        assert resolvers.resolve_item_description(item) == "c"
        item.content = ""
        assert resolvers.resolve_item_description(item) == "s"
        item.itunes_summary = ""
        assert resolvers.resolve_item_description(item) == "ce"
        item.content_encoded = ""
        assert resolvers.resolve_item_description(item) == "d"

    def test_image_four_way_fallback(self):
        channel = ChannelState(image_url="ch.jpg", itunes_image="ch-it.jpg")
        item = ItemState(image="it.jpg", itunes_image="it-it.jpg")
        assert resolvers.resolve_item_image(item, channel) == "it.jpg"
        item.image = ""
        assert resolvers.resolve_item_image(item, channel) == "it-it.jpg"
        item.itunes_image = ""
        assert resolvers.resolve_item_image(item, channel) == "ch.jpg"
        channel.image_url = ""
        assert resolvers.resolve_item_image(item, channel) == "ch-it.jpg"

    def test_guid_falls_back_to_enclosure(self):
        item = ItemState(enclosure_url="https://example.com/ep.mp3")
        assert resolvers.resolve_item_guid(item) == "https://example.com/ep.mp3"
        item.guid = "abc"
        assert resolvers.resolve_item_guid(item) == "abc"

    def test_pub_date_sources(self):
        item = ItemState(published="2024-01-01T00:00:00Z", updated="2023-01-01T00:00:00Z")
        assert resolvers.resolve_item_pub_date(item) == "2024-01-01T00:00:00Z"
        item.pub_date = "Mon, 01 Jan 2024 00:00:00 GMT"
        assert resolvers.resolve_item_pub_date(item) == "Mon, 01 Jan 2024 00:00:00 GMT"


class TestEnclosureType:
    """Explicit type or a guess from the URL."""

    @pytest.mark.parametrize("url,expected", [
        ("https://e.com/a.mp3", "audio/mpeg"),
        ("https://e.com/a.MPEG", "audio/mpeg"),
        ("https://e.com/a.m4a", "audio/mp4"),
        ("https://e.com/a.mp4?token=1", "audio/mp4"),
        ("https://e.com/a.ogg", "audio/ogg"),
        ("https://e.com/a.oga", "audio/ogg"),
        ("https://e.com/a.wav", "audio/wav"),
        ("https://e.com/a.webm", "audio/webm"),
        ("https://e.com/a.flac#t=1", "audio/flac"),
        ("https://e.com/stream", "audio/mpeg"),
    ])
    def test_guess(self, url, expected):
        assert resolvers.guess_enclosure_type(url) == expected

    def test_explicit_type_wins(self):
        item = ItemState(enclosure_url="https://e.com/a.ogg", enclosure_type="video/mp4")
        assert resolvers.resolve_enclosure_type(item) == "video/mp4"
        item.enclosure_type = ""
        assert resolvers.resolve_enclosure_type(item) == "audio/ogg"


class TestScalarParsers:
    """Durations, dates, flags and type codes."""

    @pytest.mark.parametrize("raw,expected", [
        ("83", 83),
        ("01:02", 62),
        ("1:02:03", 3723),
        ("00:01:23.5", 83),
        ("", 0),
        ("abc", 0),
        ("1:2:3:4", 0),
        ("-5", 0),
    ])
    def test_parse_duration(self, raw, expected):
        assert resolvers.parse_duration(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("Mon, 01 Jan 2024 00:00:00 GMT", 1704067200),
        ("Mon, 01 Jan 2024 01:00:00 +0100", 1704067200),
        ("2024-01-01T00:00:00Z", 1704067200),
        ("1704067200", 1704067200),
        ("not a date", 0),
        ("", 0),
        (None, 0),
    ])
    def test_parse_pub_date(self, raw, expected):
        assert resolvers.parse_pub_date(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("yes", 1), ("TRUE", 1), ("explicit", 1), ("no", 0), ("clean", 0), ("", 0),
    ])
    def test_parse_explicit(self, raw, expected):
        assert resolvers.parse_explicit(raw) == expected

    def test_parse_locked(self):
        assert resolvers.parse_locked(" yes ") == 1
        assert resolvers.parse_locked("no") == 0

    @pytest.mark.parametrize("mime_type,expected", [
        ("application/json", 1),
        ("application/srt", 2),
        ("application/x-subrip", 2),
        ("text/vtt", 3),
        ("text/html", 4),
        ("text/plain", 0),
        ("", 0),
    ])
    def test_transcript_type_code(self, mime_type, expected):
        assert resolvers.transcript_type_code(mime_type) == expected

    @pytest.mark.parametrize("mime_type,expected", [
        ("application/json+chapters", 0),
        ("application/psc+xml", 1),
        ("text/xml", 1),
        ("", 0),
    ])
    def test_chapters_type_code(self, mime_type, expected):
        assert resolvers.chapters_type_code(mime_type) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("73.0", 73.0), ("60", 60.0), ("", None), ("abc", None), ("nan", None), ("inf", None),
    ])
    def test_parse_time_offset(self, raw, expected):
        assert resolvers.parse_time_offset(raw) == expected
