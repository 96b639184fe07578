"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for podnorm tests.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["PODNORM_LOGGING__FILE_PATH"] = ""
os.environ["PODNORM_LOGGING__CONSOLE_LOGGING"] = "false"
os.environ["PODNORM_DEBUG"] = "false"

# 2024-01-01T00:00:00Z
NOW = 1704067200
DAY = 86_400


# ============================================================================
# Feed Documents
# ============================================================================

RSS_NAMESPACES = (
    'xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" '
    'xmlns:podcast="https://podcastindex.org/namespace/1.0" '
    'xmlns:atom="http://www.w3.org/2005/Atom" '
    'xmlns:content="http://purl.org/rss/1.0/modules/content/"'
)


def rss_document(channel_body: str) -> str:
    """Wrap channel content in an RSS 2.0 document with the podcast namespaces."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<rss version="2.0" {RSS_NAMESPACES}><channel>{channel_body}</channel></rss>'
    )


def rss_item(body: str = "", enclosure: str = "https://example.com/ep.mp3") -> str:
    """An <item> with a valid enclosure unless ``enclosure`` is empty."""
    enclosure_tag = (
        f'<enclosure url="{enclosure}" length="1000" type="audio/mpeg"/>' if enclosure else ""
    )
    return f"<item>{enclosure_tag}{body}</item>"


def feed_file_text(
    document: str,
    last_modified: int = 1700000000,
    etag: str = '"abc123"',
    url: str = "https://example.com/feed.xml",
    downloaded_at: int = 1700000001,
) -> str:
    """A feed file as written by the downloader: four header lines, then the body."""
    return f"{last_modified}\n{etag}\n{url}\n{downloaded_at}\n{document}"


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def memory_sink():
    """Fresh in-memory sink."""
    from podnorm.output.sinks import MemorySink

    return MemorySink()


@pytest.fixture
def normalize(memory_sink):
    """Normalize a document into ``memory_sink`` with a fixed clock.

    Usage:
        def test_title(normalize):
            sink, result = normalize(rss_document("<title>T</title>"))
    """
    from podnorm.engine.normalizer import normalize_document

    def run(document, feed_id=42, now=NOW):
        result = normalize_document(document, memory_sink, feed_id=feed_id, now=now)
        return memory_sink, result

    return run


# ============================================================================
# Ingestion Fixtures
# ============================================================================


@pytest.fixture
def input_dir(tmp_path):
    """Empty input directory for feed files."""
    directory = tmp_path / "inputs"
    directory.mkdir()
    return directory


@pytest.fixture
def write_feed_file(input_dir):
    """Write a feed file with a downloader header into ``input_dir``."""

    def write(name, document, **header):
        path = input_dir / name
        path.write_text(feed_file_text(document, **header), encoding="utf-8")
        return path

    return write


@pytest.fixture
def fresh_settings():
    """Reload settings so that environment changes made by a test apply."""
    from podnorm.config.settings import get_settings

    settings = get_settings(reload=True)
    yield settings
    get_settings(reload=True)
