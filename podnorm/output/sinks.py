"""
Podnorm Record Sinks
====================

Destinations for emitted records. The normalizer only knows the
``RecordSink`` protocol; ordering and storage belong to the sink.
"""

import itertools
import threading
import time
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from .records import Record
from ..utils.exceptions import ErrorCode, OutputError
from ..utils.logging import get_logger_for_component


class RecordSink(Protocol):
    def emit(self, record: Record) -> None:
        ...


class MemorySink:
    """Keeps records in a list, in emission order."""

    def __init__(self):
        self.records: List[Record] = []
        self._lock = threading.Lock()

    def emit(self, record: Record) -> None:
        with self._lock:
            self.records.append(record)

    def by_table(self, table) -> List[Record]:
        name = getattr(table, "value", table)
        return [r for r in self.records if r.table == name]

    def tables(self) -> Dict[str, int]:
        return dict(Counter(r.table for r in self.records))

    def __len__(self) -> int:
        return len(self.records)


class JsonDirectorySink:
    """Writes each record to its own JSON file inside one run directory.

    File names are ``{sequence}_{table}_{feed_id or NULL}.json``. The sequence
    is shared by every thread using the sink and never repeats.
    """

    def __init__(self, directory: Union[str, Path], pretty: bool = False, start: int = 1):
        self.directory = Path(directory)
        self.pretty = pretty
        self._sequence = itertools.count(start)
        self._lock = threading.Lock()
        self.logger = get_logger_for_component("sink")

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(
                f"Cannot create output directory: {e}",
                path=str(self.directory),
                error_code=ErrorCode.OUTPUT_DIRECTORY,
            ) from e

    def next_sequence(self) -> int:
        with self._lock:
            return next(self._sequence)

    def path_for(self, sequence: int, record: Record) -> Path:
        feed_part = "NULL" if record.feed_id is None else str(record.feed_id)
        return self.directory / f"{sequence}_{record.table}_{feed_part}.json"

    def emit(self, record: Record) -> None:
        path = self.path_for(self.next_sequence(), record)

        try:
            payload = record.to_json(indent=2 if self.pretty else None)
        except (TypeError, ValueError) as e:
            raise OutputError(
                f"Record for {record.table} is not JSON serializable: {e}",
                path=str(path),
                error_code=ErrorCode.OUTPUT_SERIALIZATION,
            ) from e

        try:
            path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Failed to write record: {e}", path=str(path)) from e

        self.logger.debug(f"Wrote {path.name}")


class CountingSink:
    """Forwards to another sink and counts records per table."""

    def __init__(self, inner: RecordSink):
        self.inner = inner
        self.counts: Counter = Counter()

    def emit(self, record: Record) -> None:
        self.inner.emit(record)
        self.counts[record.table] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def create_run_directory(base_dir: Union[str, Path], started_at: Optional[int] = None) -> Path:
    """Create ``base_dir/<unix start time>`` for one run and return it."""
    started_at = int(time.time()) if started_at is None else started_at
    run_dir = Path(base_dir) / str(started_at)
    try:
        run_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(
            f"Cannot create run directory: {e}",
            path=str(run_dir),
            error_code=ErrorCode.OUTPUT_DIRECTORY,
        ) from e
    return run_dir
