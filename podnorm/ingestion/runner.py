"""
Feed Batch Runner
=================

Processes a directory of downloaded feed files into one run directory.

Each file is normalized on a worker thread; an asyncio semaphore bounds how
many run at once. Files never share parser state, only the sink and its
sequence counter, so a failure in one file leaves the others untouched.
"""

import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .feed_file import discover_feed_files, parse_feed_id, read_feed_file
from ..config.settings import PodnormSettings, get_settings
from ..engine.builders import build_blank_newsfeed
from ..engine.events import iter_events
from ..engine.normalizer import FeedNormalizer
from ..output.sinks import CountingSink, JsonDirectorySink, RecordSink, create_run_directory
from ..utils.exceptions import ErrorCode, handle_exception
from ..utils.logging import PerformanceLogger, get_logger_for_component, get_runner_logger


@dataclass
class FileResult:
    """Outcome for one feed file."""
    path: Path
    feed_id: Optional[int] = None
    success: bool = True
    records_emitted: int = 0
    table_counts: Dict[str, int] = field(default_factory=dict)
    items_emitted: int = 0
    items_discarded: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None
    duration_seconds: float = 0.0


@dataclass
class BatchSummary:
    """Outcome of one directory run."""
    run_directory: Optional[Path] = None
    results: List[FileResult] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> List[FileResult]:
        return [r for r in self.results if not r.success]

    @property
    def records_emitted(self) -> int:
        return sum(r.records_emitted for r in self.results)

    def table_totals(self) -> Dict[str, int]:
        totals: Counter = Counter()
        for result in self.results:
            totals.update(result.table_counts)
        return dict(totals)


def process_feed_file(
    path: Union[str, Path],
    sink: RecordSink,
    now: Optional[int] = None,
    feed_id: Optional[int] = None,
) -> FileResult:
    """Normalize one feed file into ``sink``.

    Never raises: read, header and output failures are reported on the
    result so that a batch can carry on with the next file. ``feed_id``
    overrides the id taken from the file name.
    """
    path = Path(path)
    if feed_id is None:
        feed_id = parse_feed_id(path.name)
    now = int(time.time()) if now is None else now
    logger = get_runner_logger(feed_id=feed_id, source=path.name)
    result = FileResult(path=path, feed_id=feed_id)
    counting = CountingSink(sink)
    started = time.monotonic()

    try:
        with PerformanceLogger(logger, f"normalizing {path.name}", feed_id=feed_id):
            feed = read_feed_file(path)
            logger.debug(
                f"Header: url={feed.header.url!r} etag={feed.header.etag!r} "
                f"downloaded_at={feed.header.downloaded_at}"
            )

            if feed.is_empty:
                logger.info("Empty document, writing blank channel record")
                counting.emit(build_blank_newsfeed(feed_id, now))
            else:
                outcome = FeedNormalizer(counting, feed_id=feed_id, now=now).process(
                    iter_events(feed.body)
                )
                result.items_emitted = outcome.items_emitted
                result.items_discarded = outcome.items_discarded
                if outcome.error is not None:
                    result.success = False
                    result.error = str(outcome.error)
                    result.error_code = outcome.error.error_code.value

    except Exception as e:
        error = handle_exception(e, logger, f"normalizing {path.name}", {"feed_id": feed_id})
        result.success = False
        result.error = str(error)
        result.error_code = error.error_code.value if error.error_code else None

    result.records_emitted = counting.total
    result.table_counts = dict(counting.counts)
    result.duration_seconds = time.monotonic() - started
    return result


async def process_files(
    paths: Iterable[Union[str, Path]],
    sink: RecordSink,
    parallel_feeds: int = 4,
    now: Optional[int] = None,
) -> List[FileResult]:
    """Normalize several files concurrently, results in input order."""
    semaphore = asyncio.Semaphore(max(1, parallel_feeds))

    async def run_one(path: Path) -> FileResult:
        async with semaphore:
            return await asyncio.to_thread(process_feed_file, path, sink, now)

    tasks = [
        asyncio.create_task(run_one(Path(p)), name=f"normalize_{Path(p).name}")
        for p in paths
    ]
    return list(await asyncio.gather(*tasks))


class FeedBatchRunner:
    """Runs every feed file of an input directory into a new run directory."""

    def __init__(self, settings: Optional[PodnormSettings] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger_for_component("runner")

    async def run(
        self,
        input_dir: Optional[Union[str, Path]] = None,
        output_dir: Optional[Union[str, Path]] = None,
        parallel_feeds: Optional[int] = None,
        started_at: Optional[int] = None,
    ) -> BatchSummary:
        input_dir = Path(input_dir or self.settings.ingestion.input_dir)
        output_dir = Path(output_dir or self.settings.output.output_dir)
        parallel_feeds = parallel_feeds or self.settings.ingestion.parallel_feeds
        started_at = int(time.time()) if started_at is None else started_at

        files = discover_feed_files(input_dir, self.settings.ingestion.extensions)
        run_directory = create_run_directory(output_dir, started_at)
        sink = JsonDirectorySink(run_directory, pretty=self.settings.output.pretty_json)

        self.logger.info(
            f"Processing {len(files)} feed files from {input_dir} into {run_directory} "
            f"({parallel_feeds} at a time)"
        )

        results = await process_files(files, sink, parallel_feeds=parallel_feeds, now=started_at)
        summary = BatchSummary(run_directory=run_directory, results=results)

        self.logger.info(
            f"Finished {summary.succeeded}/{summary.total_files} feeds, "
            f"{summary.records_emitted} records written"
        )
        if summary.failed:
            parse_failures = [
                r.path.name for r in summary.failed
                if r.error_code == ErrorCode.FEED_PARSE_ERROR.value
            ]
            self.logger.warning(
                f"{len(summary.failed)} feeds failed ({len(parse_failures)} malformed XML)"
            )

        return summary
