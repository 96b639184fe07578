"""
Podnorm Ingestion Layer
=======================

Reading downloaded feed files and running them through the normalizer.

This module provides:
- Feed file header parsing and feed id extraction
- Input directory discovery
- Concurrent batch processing into a run directory
"""

from .feed_file import FeedFile, FeedFileHeader, discover_feed_files, parse_feed_id, read_feed_file
from .runner import BatchSummary, FeedBatchRunner, FileResult, process_feed_file, process_files

__all__ = [
    "FeedFile",
    "FeedFileHeader",
    "discover_feed_files",
    "parse_feed_id",
    "read_feed_file",
    "BatchSummary",
    "FeedBatchRunner",
    "FileResult",
    "process_feed_file",
    "process_files",
]
