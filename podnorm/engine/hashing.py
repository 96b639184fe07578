"""
Change-detection hashing.

Two md5 digests per channel: a running one fed item by item as items
complete, and one computed at channel end over the channel's own fields.
Fields are trimmed and concatenated without separators, which keeps the
digests byte-compatible with hashes already stored downstream.
"""

import hashlib
from typing import Optional


class ContentHasher:
    """Incremental md5 over an ordered sequence of text fields."""

    def __init__(self):
        self._digest = hashlib.md5()
        self.fields_folded = 0

    def fold(self, *values: Optional[str]) -> None:
        """Fold fields in order; None hashes the same as an empty string."""
        for value in values:
            self._digest.update((value or "").strip().encode("utf-8"))
            self.fields_folded += 1

    def hexdigest(self) -> str:
        return self._digest.hexdigest()


def item_hash_fields(
    title: str,
    link: str,
    enclosure_url: str,
    enclosure_type: str,
    funding_url: str,
    funding_text: str,
) -> tuple:
    """Fields an item contributes to the running channel hash, in fold order."""
    return (title, link, enclosure_url, enclosure_type, funding_url, funding_text)


def channel_content_hash(
    title: str,
    link: str,
    language: str,
    generator: str,
    itunes_author: str,
    owner_name: str,
    owner_email: str,
) -> str:
    """Hex md5 over the stable channel fields."""
    hasher = ContentHasher()
    hasher.fold(title, link, language, generator, itunes_author, owner_name, owner_email)
    return hasher.hexdigest()
