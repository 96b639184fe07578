"""
Namespace canonicalization.

Every element is reduced to one canonical tag key before dispatch:
``itunes:image``, ``podcast:funding``, ``atom:link`` or a bare ``title``.
Prefixes chosen by the feed author never matter, only the namespace URI.
"""

from typing import Dict, Optional

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
PODCAST_NS = "https://podcastindex.org/namespace/1.0"
PODCAST_NS_LEGACY = "http://podcastindex.org/namespace/1.0"
ATOM_NS = "http://www.w3.org/2005/Atom"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
MEDIA_NS = "http://search.yahoo.com/mrss/"

NAMESPACE_PREFIXES: Dict[str, str] = {
    ITUNES_NS: "itunes",
    PODCAST_NS: "podcast",
    PODCAST_NS_LEGACY: "podcast",
    ATOM_NS: "atom",
    CONTENT_NS: "content",
    MEDIA_NS: "media",
}

# Lookup keys are lower-cased with the trailing slash removed
_PREFIX_BY_KEY: Dict[str, str] = {
    uri.lower().rstrip("/"): prefix for uri, prefix in NAMESPACE_PREFIXES.items()
}


def namespace_prefix(namespace: Optional[str]) -> Optional[str]:
    """Canonical prefix for a namespace URI, or None when it is not one we know."""
    if not namespace:
        return None
    return _PREFIX_BY_KEY.get(namespace.strip().lower().rstrip("/"))


def canonical_tag(namespace: Optional[str], local_name: str) -> str:
    """Build the dispatch key for an element; unknown namespaces give the bare name."""
    known = namespace_prefix(namespace)
    if known:
        return f"{known}:{local_name}"
    return local_name
