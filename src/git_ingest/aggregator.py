"""Bounded-concurrency content aggregation with ordered output."""

from __future__ import annotations

import asyncio
import codecs
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Union

from .errors import FileProcessingError
from .models import AggregationStats, FileEntry, SkipDecision
from .scanner.classifier import FileClassifier, format_file_size
from .sink import OutputSink

logger = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """Result of classifying and reading one file."""

    index: int
    entry: FileEntry
    decision: SkipDecision
    content: Optional[str] = None
    bytes_read: int = 0
    truncated: bool = False
    error: Optional[FileProcessingError] = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        if self.decision.skip:
            return "skipped"
        return "processed"


class OutcomeFormatter(Protocol):
    """Turns a finished file into the text block written to the artifact."""

    def format(self, outcome: FileOutcome) -> str: ...


def truncation_notice(shown_bytes: int, total_bytes: int) -> str:
    return f"[File truncated - showing first {format_file_size(shown_bytes)} of {format_file_size(total_bytes)} total]"


def read_content(path: Path, size_bytes: int, truncate_bytes: int) -> Tuple[str, int, bool]:
    """Read a text file, keeping only the first ``truncate_bytes`` of oversized ones.

    Returns:
        Tuple of (decoded text, bytes read, truncated flag)
    """
    truncated = bool(truncate_bytes) and size_bytes > truncate_bytes
    with Path(path).open("rb") as handle:
        data = handle.read(truncate_bytes) if truncated else handle.read()

    if truncated:
        # Drop a multi-byte character cut in half at the boundary.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        text = decoder.decode(data, final=False)
    else:
        text = data.decode("utf-8", errors="replace")
    return text, len(data), truncated


class ContentAggregator:
    """Classifies and reads files concurrently, writes them in submission order.

    At most ``concurrency_limit`` files are in flight or waiting to be written
    at any time: a slot is taken when a file is submitted and returned only
    after its block reaches the sink. A single writer drains completed
    results, holding early finishers until every earlier file is written, and
    is the only code that touches the sink or the statistics.
    """

    def __init__(self, classifier: FileClassifier, concurrency_limit: int = 10, truncate_bytes: int = 0):
        """Initialize aggregator.

        Args:
            classifier: Per-file skip policy
            concurrency_limit: Maximum files in flight
            truncate_bytes: Content cap for included files (0 keeps everything)
        """
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")
        self.classifier = classifier
        self.concurrency_limit = concurrency_limit
        self.truncate_bytes = truncate_bytes

    async def aggregate(
        self,
        entries: Sequence[FileEntry],
        sink: OutputSink,
        formatter: OutcomeFormatter,
    ) -> AggregationStats:
        """Write one block per entry to ``sink`` and return the run statistics.

        Per-file failures become skip or error blocks. Only sink failures and
        unexpected exceptions propagate.
        """
        stats = AggregationStats()
        if not entries:
            return stats

        window = asyncio.Semaphore(self.concurrency_limit)
        completed: asyncio.Queue[Union[FileOutcome, BaseException]] = asyncio.Queue()
        workers: List[asyncio.Task] = []

        async def run_one(index: int, entry: FileEntry) -> None:
            try:
                outcome = await self._process(index, entry)
            except Exception as exc:
                await completed.put(exc)
                return
            await completed.put(outcome)

        async def submit() -> None:
            for index, entry in enumerate(entries):
                await window.acquire()
                workers.append(asyncio.create_task(run_one(index, entry)))

        async def drain() -> None:
            held: dict[int, FileOutcome] = {}
            next_index = 0
            while next_index < len(entries):
                item = await completed.get()
                if isinstance(item, BaseException):
                    raise item
                held[item.index] = item
                while next_index in held:
                    outcome = held.pop(next_index)
                    await sink.write(formatter.format(outcome))
                    self._record(stats, outcome)
                    window.release()
                    next_index += 1

        submitter = asyncio.create_task(submit())
        try:
            await drain()
            await submitter
        finally:
            pending = [task for task in [submitter, *workers] if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        logger.info(
            "Aggregated %d files: %d processed, %d skipped, %d errors",
            len(entries),
            stats.files_processed,
            stats.files_skipped,
            stats.errors,
        )
        return stats

    async def _process(self, index: int, entry: FileEntry) -> FileOutcome:
        decision = await self.classifier.classify_async(entry.path)
        if decision.skip:
            logger.debug("Skipping %s: %s", entry.relative_path, decision.reason)
            return FileOutcome(index=index, entry=entry, decision=decision)

        try:
            content, bytes_read, truncated = await asyncio.to_thread(
                read_content, entry.path, decision.size_bytes, self.truncate_bytes
            )
        except OSError as exc:
            reason = exc.strerror or str(exc)
            logger.warning("Could not read %s: %s", entry.relative_path, reason)
            error = FileProcessingError(reason, entry.relative_path, exc)
            return FileOutcome(index=index, entry=entry, decision=decision, error=error)

        return FileOutcome(
            index=index,
            entry=entry,
            decision=decision,
            content=content,
            bytes_read=bytes_read,
            truncated=truncated,
        )

    @staticmethod
    def _record(stats: AggregationStats, outcome: FileOutcome) -> None:
        status = outcome.status
        if status == "processed":
            stats.files_processed += 1
            stats.total_bytes += outcome.bytes_read
        elif status == "skipped":
            stats.files_skipped += 1
        else:
            stats.errors += 1
