"""
Feed File Reader
================

Downloaded feeds are stored one per file, named ``<feed id>_<http status>``
with a ``.xml`` or ``.txt`` extension. Four header lines precede the
document itself:

    1700000000                      last-modified (unix seconds)
    "abc123" or [[NO_ETAG]]         etag
    https://example.com/feed.xml    source URL
    1700000001                      download time (unix seconds)
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from ..utils.exceptions import ErrorCode, FeedError, FeedHeaderError

NO_ETAG = "[[NO_ETAG]]"
HEADER_LINE_COUNT = 4

_FEED_ID = re.compile(r"^(\d+)(?:_|$)")


class FeedFileHeader(BaseModel):
    """Metadata recorded by the downloader in front of the document."""
    last_modified: int = Field(default=0, ge=0, description="Last-Modified header as unix seconds")
    etag: Optional[str] = Field(default=None, description="ETag header, None when the server sent none")
    url: str = Field(default="", description="URL the feed was downloaded from")
    downloaded_at: int = Field(default=0, ge=0, description="Download time as unix seconds")

    @field_validator('etag')
    @classmethod
    def normalize_etag(cls, v):
        """Map the no-etag marker and blanks to None."""
        if v is None:
            return None
        v = v.strip()
        if not v or v == NO_ETAG:
            return None
        return v


@dataclass
class FeedFile:
    """A feed file split into its header and document body."""
    path: Path
    feed_id: Optional[int]
    header: FeedFileHeader
    body: bytes

    @property
    def is_empty(self) -> bool:
        """True when the downloader stored no document, only whitespace."""
        return not self.body.strip()


def parse_feed_id(filename: Union[str, Path]) -> Optional[int]:
    """Feed id from ``<feed id>_<http status>.<ext>``; None if the stem has none."""
    stem = Path(filename).stem
    match = _FEED_ID.match(stem)
    return int(match.group(1)) if match else None


def _parse_timestamp(raw: str, line_number: int, source: Optional[str]) -> int:
    text = raw.strip()
    if not text:
        return 0
    if not text.isdigit():
        raise FeedHeaderError(
            f"Header line {line_number} is not a unix timestamp: {text[:40]!r}",
            source=source,
        )
    return int(text)


def split_header(raw: bytes, source: Optional[str] = None) -> Tuple[FeedFileHeader, bytes]:
    """Separate the four header lines from the document that follows them."""
    lines = []
    rest = raw
    for _ in range(HEADER_LINE_COUNT):
        if not rest:
            break
        line, sep, rest = rest.partition(b"\n")
        lines.append(line.rstrip(b"\r"))
        if not sep:
            rest = b""

    if len(lines) < HEADER_LINE_COUNT:
        raise FeedHeaderError(
            f"Expected {HEADER_LINE_COUNT} header lines, found {len(lines)}",
            source=source,
        )

    try:
        text_lines = [line.decode("utf-8") for line in lines]
    except UnicodeDecodeError as e:
        raise FeedHeaderError(f"Header is not UTF-8: {e}", source=source) from e

    header = FeedFileHeader(
        last_modified=_parse_timestamp(text_lines[0], 1, source),
        etag=text_lines[1],
        url=text_lines[2].strip(),
        downloaded_at=_parse_timestamp(text_lines[3], 4, source),
    )
    return header, rest


def read_feed_file(path: Union[str, Path]) -> FeedFile:
    """Read a feed file fully into memory and split off its header.

    Raises:
        FeedError: If the file cannot be read
        FeedHeaderError: If the header block is missing or malformed
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise FeedError(
            f"Feed file not found: {path}",
            source=str(path),
            error_code=ErrorCode.FEED_NOT_FOUND,
            recoverable=False,
        ) from e
    except OSError as e:
        raise FeedError(f"Cannot read feed file: {e}", source=str(path)) from e

    header, body = split_header(raw, source=path.name)
    return FeedFile(path=path, feed_id=parse_feed_id(path.name), header=header, body=body)


def discover_feed_files(
    input_dir: Union[str, Path], extensions: Iterable[str] = (".xml", ".txt")
) -> List[Path]:
    """Feed files directly inside ``input_dir``, sorted by name."""
    directory = Path(input_dir)
    if not directory.is_dir():
        raise FeedError(
            f"Input directory does not exist: {directory}",
            source=str(directory),
            error_code=ErrorCode.FEED_NOT_FOUND,
            recoverable=False,
        )

    wanted = {ext.lower() for ext in extensions}
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted
    )
