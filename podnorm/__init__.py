"""
Podnorm - Podcast Feed Normalizer
=================================

Converts downloaded podcast RSS/Atom feeds into normalized records for bulk
loading into the podcast index tables.

Main Components:
- Engine: streaming XML state machine with field precedence rules
- Output: record model plus memory and JSON-directory sinks
- Ingestion: feed file headers, input discovery and batch processing
- Configuration: environment variables with Pydantic validation
"""

__version__ = "0.3.0"
__author__ = "Podnorm Development Team"
__description__ = "Streaming podcast feed normalizer"

from .config.settings import get_settings
from .engine import FeedNormalizer, normalize_document
from .output import JsonDirectorySink, MemorySink, Record
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import PodnormError

__all__ = [
    "get_settings",
    "FeedNormalizer",
    "normalize_document",
    "JsonDirectorySink",
    "MemorySink",
    "Record",
    "configure_application_logging",
    "get_logger_for_component",
    "PodnormError",
]
