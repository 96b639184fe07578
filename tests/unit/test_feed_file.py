"""
Unit Tests for Feed File Reading
================================

Header parsing, feed ids and input discovery.
"""

import pytest

from podnorm.ingestion.feed_file import (
    FeedFileHeader,
    discover_feed_files,
    parse_feed_id,
    read_feed_file,
    split_header,
)
from podnorm.utils.exceptions import ErrorCode, FeedError, FeedHeaderError


class TestFeedId:
    """Feed id from the file name."""

    @pytest.mark.parametrize("name,expected", [
        ("1234_200.xml", 1234),
        ("1234.txt", 1234),
        ("/some/dir/99_304.xml", 99),
        ("feed.xml", None),
        ("abc_200.xml", None),
    ])
    def test_parse_feed_id(self, name, expected):
        assert parse_feed_id(name) == expected


class TestHeader:
    """The four downloader header lines."""

    def test_split_header(self):
        raw = b'1700000000\n"abc"\nhttps://e.com/feed.xml\n1700000001\n<rss/>'
        header, body = split_header(raw)
        assert header.last_modified == 1700000000
        assert header.etag == '"abc"'
        assert header.url == "https://e.com/feed.xml"
        assert header.downloaded_at == 1700000001
        assert body == b"<rss/>"

    def test_crlf_lines(self):
        raw = b"1\r\n[[NO_ETAG]]\r\nhttps://e.com\r\n2\r\n<rss/>"
        header, body = split_header(raw)
        assert header.etag is None
        assert header.url == "https://e.com"
        assert body == b"<rss/>"

    def test_no_etag_marker(self):
        assert FeedFileHeader(etag="[[NO_ETAG]]").etag is None
        assert FeedFileHeader(etag="  ").etag is None

    def test_blank_timestamps_default_to_zero(self):
        header, _ = split_header(b"\n\nhttps://e.com\n\n")
        assert header.last_modified == 0
        assert header.downloaded_at == 0

    def test_too_few_lines(self):
        with pytest.raises(FeedHeaderError):
            split_header(b"1700000000\n\"abc\"\n")

    def test_bad_timestamp(self):
        with pytest.raises(FeedHeaderError) as exc_info:
            split_header(b"yesterday\n\"abc\"\nhttps://e.com\n1\n<rss/>")
        assert exc_info.value.error_code == ErrorCode.FEED_HEADER_INVALID


class TestReadFeedFile:
    """Reading whole files."""

    def test_read(self, write_feed_file):
        path = write_feed_file("77_200.xml", "<rss><channel/></rss>")
        feed = read_feed_file(path)
        assert feed.feed_id == 77
        assert feed.body == b"<rss><channel/></rss>"
        assert not feed.is_empty

    def test_empty_body(self, write_feed_file):
        feed = read_feed_file(write_feed_file("78_200.xml", "  \n"))
        assert feed.is_empty

    def test_missing_file(self, tmp_path):
        with pytest.raises(FeedError) as exc_info:
            read_feed_file(tmp_path / "nope.xml")
        assert exc_info.value.error_code == ErrorCode.FEED_NOT_FOUND


class TestDiscovery:
    """Finding feed files in the input directory."""

    def test_sorted_and_filtered(self, input_dir):
        for name in ("2_200.xml", "1_200.txt", "notes.md", "3_200.XML"):
            (input_dir / name).write_text("x")
        (input_dir / "sub.xml").mkdir()
        found = [p.name for p in discover_feed_files(input_dir)]
        assert found == ["1_200.txt", "2_200.xml", "3_200.XML"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FeedError):
            discover_feed_files(tmp_path / "missing")
