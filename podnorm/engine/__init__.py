"""
Podnorm Normalization Engine
============================

Streaming state machine that turns RSS/Atom podcast feed events into
table records.

This module provides:
- XML event source and namespace canonicalization
- Scope-tracking parser state and the element dispatch table
- Field resolution, value blocks, categories, hashing and update frequency
"""

from .events import iter_events
from .normalizer import FeedNormalizer, NormalizeResult, normalize_document

__all__ = [
    "iter_events",
    "FeedNormalizer",
    "NormalizeResult",
    "normalize_document",
]
