"""
XML event source.

Turns a buffered feed document into a flat stream of start, text and end
events using the namespace-aware expat reader from ``xml.sax``. The
normalizer only ever sees these event types, never the parser itself.
"""

import xml.sax
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union
from xml.sax.handler import (
    ContentHandler,
    feature_external_ges,
    feature_external_pes,
    feature_namespaces,
)

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class StartElement:
    local_name: str
    namespace: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class Characters:
    """Character data; CDATA sections arrive as plain characters too."""
    text: str


@dataclass
class EndElement:
    local_name: str
    namespace: Optional[str] = None


@dataclass
class ParseFailure:
    """Terminal event: the document is not well-formed past this point."""
    message: str
    line: Optional[int] = None
    column: Optional[int] = None


FeedEvent = Union[StartElement, Characters, EndElement, ParseFailure]


class _EventCollector(ContentHandler):
    """SAX handler buffering events until the caller drains them."""

    def __init__(self):
        super().__init__()
        self._pending: List[FeedEvent] = []

    def startElementNS(self, name, qname, attrs):
        namespace, local_name = name
        attributes: Dict[str, str] = {}
        for (attr_ns, attr_local), value in attrs.items():
            # Un-namespaced attributes win over namespaced ones of the same name
            if attr_ns is None or attr_local not in attributes:
                attributes[attr_local] = value
        self._pending.append(StartElement(local_name, namespace, attributes))

    def endElementNS(self, name, qname):
        namespace, local_name = name
        self._pending.append(EndElement(local_name, namespace))

    def characters(self, content):
        if self._pending and isinstance(self._pending[-1], Characters):
            self._pending[-1].text += content
        else:
            self._pending.append(Characters(content))

    def drain(self) -> List[FeedEvent]:
        events, self._pending = self._pending, []
        return events


def _make_reader(handler: ContentHandler):
    reader = xml.sax.make_parser()
    reader.setFeature(feature_namespaces, True)
    reader.setFeature(feature_external_ges, False)
    reader.setFeature(feature_external_pes, False)
    reader.setContentHandler(handler)
    return reader


def iter_events(
    data: Union[bytes, str], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[FeedEvent]:
    """Yield the events of one document in order.

    A syntax error ends the stream with a single ``ParseFailure`` after every
    event produced before the error.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    if not data.strip():
        # expat reports nothing at all for an empty buffer
        yield ParseFailure(message="no element found", line=1, column=0)
        return

    handler = _EventCollector()
    reader = _make_reader(handler)

    try:
        for offset in range(0, len(data), chunk_size):
            reader.feed(data[offset:offset + chunk_size])
            yield from handler.drain()
        reader.close()
    except xml.sax.SAXParseException as exc:
        yield from handler.drain()
        yield ParseFailure(
            message=exc.getMessage(),
            line=exc.getLineNumber(),
            column=exc.getColumnNumber(),
        )
        return

    yield from handler.drain()
