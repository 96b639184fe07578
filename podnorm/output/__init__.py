"""
Podnorm Output Layer
====================

Record model and the sinks records are written to.
"""

from .records import Record, Table
from .sinks import CountingSink, JsonDirectorySink, MemorySink, RecordSink, create_run_directory

__all__ = [
    "Record",
    "Table",
    "CountingSink",
    "JsonDirectorySink",
    "MemorySink",
    "RecordSink",
    "create_run_directory",
]
