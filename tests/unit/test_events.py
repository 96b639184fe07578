"""
Unit Tests for the XML Event Source
===================================

Namespace canonicalization and SAX event production.
"""

import pytest

from podnorm.engine.events import (
    Characters,
    EndElement,
    ParseFailure,
    StartElement,
    iter_events,
)
from podnorm.engine.namespaces import (
    ATOM_NS,
    ITUNES_NS,
    PODCAST_NS,
    PODCAST_NS_LEGACY,
    canonical_tag,
    namespace_prefix,
)


class TestNamespaces:
    """Dispatch keys depend on namespace URIs, not author prefixes."""

    def test_known_namespaces(self):
        assert canonical_tag(ITUNES_NS, "image") == "itunes:image"
        assert canonical_tag(PODCAST_NS, "funding") == "podcast:funding"
        assert canonical_tag(PODCAST_NS_LEGACY, "funding") == "podcast:funding"
        assert canonical_tag(ATOM_NS, "link") == "atom:link"

    def test_uri_lookup_is_lenient(self):
        assert namespace_prefix("HTTPS://PODCASTINDEX.ORG/NAMESPACE/1.0/") == "podcast"
        assert namespace_prefix("http://unknown.example/ns") is None
        assert namespace_prefix(None) is None

    def test_unknown_namespace_is_bare(self):
        assert canonical_tag("http://unknown.example/ns", "title") == "title"
        assert canonical_tag(None, "title") == "title"


class TestIterEvents:
    """Start, text and end events from a buffered document."""

    def test_basic_stream(self):
        events = list(iter_events(b'<rss><channel><title>Show</title></channel></rss>'))
        assert events[0] == StartElement("rss", None, {})
        assert StartElement("title", None, {}) in events
        assert Characters("Show") in events
        assert events[-1] == EndElement("rss", None)

    def test_namespaced_elements_and_attributes(self):
        document = (
            f'<rss xmlns:itunes="{ITUNES_NS}"><channel>'
            '<itunes:image href="https://e.com/a.jpg"/></channel></rss>'
        )
        starts = [e for e in iter_events(document) if isinstance(e, StartElement)]
        image = starts[-1]
        assert image.local_name == "image"
        assert image.namespace == ITUNES_NS
        assert image.attributes == {"href": "https://e.com/a.jpg"}

    def test_author_prefix_resolves_to_namespace(self):
        document = (
            f'<rss xmlns:it="{ITUNES_NS}"><channel><it:author>A</it:author></channel></rss>'
        )
        starts = [e for e in iter_events(document) if isinstance(e, StartElement)]
        author = starts[-1]
        assert canonical_tag(author.namespace, author.local_name) == "itunes:author"

    def test_cdata_arrives_as_text(self):
        events = list(iter_events("<d><![CDATA[<b>bold</b>]]> tail</d>"))
        text = "".join(e.text for e in events if isinstance(e, Characters))
        assert text == "<b>bold</b> tail"

    def test_small_chunks_give_same_events(self):
        document = '<rss><channel><title>A long enough title</title></channel></rss>'
        whole = list(iter_events(document))
        chunked = list(iter_events(document, chunk_size=3))
        text_whole = "".join(e.text for e in whole if isinstance(e, Characters))
        text_chunked = "".join(e.text for e in chunked if isinstance(e, Characters))
        assert text_whole == text_chunked
        assert [e for e in whole if not isinstance(e, Characters)] == [
            e for e in chunked if not isinstance(e, Characters)
        ]

    def test_malformed_document_ends_with_failure(self):
        events = list(iter_events("<rss><channel><title>ok</title><item></channel></rss>"))
        assert isinstance(events[-1], ParseFailure)
        assert events[-1].line == 1
        assert StartElement("item", None, {}) in events
        assert sum(isinstance(e, ParseFailure) for e in events) == 1

    def test_truncated_document_fails(self):
        events = list(iter_events("<rss><channel><title>cut"))
        assert isinstance(events[-1], ParseFailure)

    def test_external_entities_not_resolved(self):
        document = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE r [<!ENTITY ext SYSTEM "file:///etc/passwd">]>'
            '<r>&ext;</r>'
        )
        events = list(iter_events(document))
        text = "".join(e.text for e in events if isinstance(e, Characters))
        assert "root:" not in text

    @pytest.mark.parametrize("data", [b"", ""])
    def test_empty_input_fails(self, data):
        events = list(iter_events(data))
        assert len(events) == 1
        assert isinstance(events[0], ParseFailure)
