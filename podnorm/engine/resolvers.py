"""
Field resolution.

Feeds often carry the same logical field in several tags (RSS, iTunes,
Atom, podcast namespace). The functions here pick the effective value from
the accumulated candidates using a fixed priority per field, and parse the
loosely formatted scalar fields (durations, dates, flags).
"""

import calendar
import re
from typing import Optional

from feedparser.datetimes import _parse_date as parse_feed_date

from ..utils.sanitizers import INT32_MAX, clamp_int

_SIGNED_INT = re.compile(r"^[+-]?\d+$")

ENCLOSURE_TYPE_BY_SUFFIX = (
    ((".mp3", ".mpeg"), "audio/mpeg"),
    ((".m4a", ".mp4"), "audio/mp4"),
    ((".ogg", ".oga"), "audio/ogg"),
    ((".wav",), "audio/wav"),
    ((".webm",), "audio/webm"),
    ((".flac",), "audio/flac"),
)
DEFAULT_ENCLOSURE_TYPE = "audio/mpeg"


def first_non_empty(*candidates: Optional[str]) -> str:
    """First candidate with non-whitespace content, trimmed."""
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return ""


# ============================================================================
# Channel fields
# ============================================================================


def resolve_channel_description(channel) -> str:
    return first_non_empty(channel.itunes_summary, channel.description)


def resolve_channel_image(channel) -> str:
    return first_non_empty(channel.image_url, channel.itunes_image)


def resolve_podcast_owner(channel) -> str:
    """Explicit ``podcast:locked@owner``, else the iTunes owner email of a locked feed."""
    if channel.locked_owner.strip():
        return channel.locked_owner.strip()
    if channel.locked == 1:
        return channel.owner_email.strip()
    return ""


# ============================================================================
# Item fields
# ============================================================================


def resolve_item_title(item) -> str:
    """``itunes:title`` is taken verbatim; a plain ``title`` is trimmed."""
    if item.itunes_title.strip():
        return item.itunes_title
    return item.title.strip()


def resolve_item_description(item) -> str:
    return first_non_empty(
        item.content, item.itunes_summary, item.content_encoded, item.description
    )


def resolve_item_image(item, channel=None) -> str:
    channel_image = channel.image_url if channel is not None else ""
    channel_itunes_image = channel.itunes_image if channel is not None else ""
    return first_non_empty(item.image, item.itunes_image, channel_image, channel_itunes_image)


def resolve_item_guid(item) -> str:
    return first_non_empty(item.guid, item.enclosure_url)


def resolve_item_pub_date(item) -> str:
    """Raw publish date: RSS ``pubDate`` first, then Atom published/updated."""
    return first_non_empty(item.pub_date, item.published, item.updated)


def guess_enclosure_type(url: str) -> str:
    """MIME type from the URL suffix, ignoring any query string."""
    path = (url or "").strip().lower().split("?", 1)[0].split("#", 1)[0]
    for suffixes, mime_type in ENCLOSURE_TYPE_BY_SUFFIX:
        if path.endswith(suffixes):
            return mime_type
    return DEFAULT_ENCLOSURE_TYPE


def resolve_enclosure_type(item) -> str:
    return first_non_empty(item.enclosure_type) or guess_enclosure_type(item.enclosure_url)


# ============================================================================
# Scalar parsers
# ============================================================================


def parse_duration(raw: Optional[str]) -> int:
    """Seconds from ``"83"``, ``"01:02"`` or ``"1:02:03"``; anything else is 0."""
    text = (raw or "").strip()
    if not text:
        return 0
    if _SIGNED_INT.match(text):
        return clamp_int(max(int(text), 0))

    parts = text.split(":")
    if len(parts) > 3:
        return 0

    total = 0
    for index, part in enumerate(parts):
        part = part.strip()
        is_last = index == len(parts) - 1
        if part.isdigit():
            value = int(part)
        elif is_last and re.match(r"^\d+\.\d*$", part):
            # fractional seconds are dropped
            value = int(float(part))
        else:
            return 0
        total = total * 60 + value

    return min(total, INT32_MAX)


def parse_pub_date(raw: Optional[str]) -> int:
    """Unix seconds for a feed date, or 0 when no format matches."""
    text = (raw or "").strip()
    if not text:
        return 0
    if _SIGNED_INT.match(text):
        return int(text)

    parsed = parse_feed_date(text)
    if parsed is not None:
        return calendar.timegm(parsed)

    return 0


def parse_explicit(raw: Optional[str]) -> int:
    return 1 if (raw or "").strip().lower() in ("yes", "true", "explicit") else 0


def parse_locked(raw: Optional[str]) -> int:
    return 1 if (raw or "").strip().lower() in ("yes", "true") else 0


def transcript_type_code(mime_type: Optional[str]) -> int:
    lowered = (mime_type or "").strip().lower()
    if "json" in lowered:
        return 1
    if "srt" in lowered or "subrip" in lowered:
        return 2
    if "vtt" in lowered:
        return 3
    if "html" in lowered:
        return 4
    return 0


def chapters_type_code(mime_type: Optional[str]) -> int:
    lowered = (mime_type or "").strip().lower()
    if "json" in lowered:
        return 0
    if "psc" in lowered or "xml" in lowered:
        return 1
    return 0


def parse_time_offset(raw: Optional[str]) -> Optional[float]:
    """Soundbite start/duration in seconds; None when not a number."""
    text = (raw or "").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value
