"""
Podnorm Sanitizers
==================

String and number normalization primitives shared by every record builder.
The widths mirror the column sizes of the downstream podcast index tables.
"""

import re
from typing import Optional
from urllib.parse import quote


class FieldLimits:
    """Maximum widths (in characters) of the legacy record columns."""

    ITEM_TITLE = 1024
    ITEM_GUID = 740
    ENCLOSURE_URL = 738
    ENCLOSURE_TYPE = 128
    CHANNEL_LANGUAGE = 8
    PODCAST_OWNER = 255
    SOUNDBITE_TITLE = 500
    PERSON_TEXT = 128
    PERSON_URL = 768
    URL = 768


INT32_MAX = 2_147_483_647
INT32_MIN = -2_147_483_647
INT63_MAX = 9_223_372_036_854_775_807

_PARTIAL_ESCAPE = re.compile(r"%[0-9A-Fa-f]?$")
_SIGNED_INT = re.compile(r"^[+-]?\d+$")


def truncate(value: Optional[str], max_length: int) -> str:
    """Cut a string to at most ``max_length`` characters (not bytes)."""
    if not value:
        return ""
    if len(value) <= max_length:
        return value
    return value[:max_length]


def clamp_int(value: int, low: int = INT32_MIN, high: int = INT32_MAX) -> int:
    """Clamp an integer into the signed 32-bit column range."""
    return max(low, min(high, value))


def sanitize_url(url: Optional[str], max_length: int = FieldLimits.URL) -> str:
    """Percent-encode characters outside Latin-1 and fit the URL into a column.

    The URL is trimmed and cut to width first. Encoding can grow it again,
    so the result is cut a second time, dropping any escape sequence the
    second cut left incomplete.
    """
    if not url:
        return ""

    cleaned = truncate(url.strip(), max_length)
    encoded = "".join(
        ch if ord(ch) <= 0xFF else quote(ch, safe="") for ch in cleaned
    )

    if len(encoded) > max_length:
        encoded = _PARTIAL_ESCAPE.sub("", encoded[:max_length])

    return encoded


def parse_optional_int(raw: Optional[str]) -> Optional[int]:
    """Parse an integer field, clamped to 32 bits; non-numeric text gives None."""
    if raw is None:
        return None
    text = raw.strip()
    if not _SIGNED_INT.match(text):
        return None
    return clamp_int(int(text))


def parse_enclosure_length(raw: Optional[str]) -> int:
    """Byte length of an enclosure; unparsable or out-of-range values give 0."""
    if not raw:
        return 0
    text = raw.strip()
    if not _SIGNED_INT.match(text):
        return 0
    length = int(text)
    if length < 0 or length > INT63_MAX:
        return 0
    return length


def is_http_url(url: Optional[str]) -> bool:
    """True for absolute http:// or https:// URLs."""
    if not url:
        return False
    lowered = url.strip().lower()
    for scheme in ("http://", "https://"):
        if lowered.startswith(scheme):
            return len(lowered) > len(scheme)
    return False
