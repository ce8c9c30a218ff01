# src/batch/coordinator.py — v2
"""Batch coordinator: bounded concurrent batches over a record queue.

Items of one batch run as concurrent asyncio tasks; the next batch
starts only after every item of the current one has settled. Each item
task returns exactly one ItemOutcome, and only the coordinator updates
the aggregate counters and the progress reporter.

An archive file is normalized at most once per run. When a selection
reaches the same archive twice (a parent and its own attachment, or a
repeated entry), the later queue entry is reported as skipped.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any, Callable, NamedTuple

from texnorm.batch.models import BatchProgress, BatchResult, QueueEntry
from texnorm.batch.resolver import RecordResolver
from texnorm.core.errors import NormalizationError
from texnorm.logging.context import set_batch_context, set_record_context
from texnorm.pipeline.archive_pipeline import ArchivePipeline
from texnorm.pipeline.models import ItemOutcome
from texnorm.pipeline.state import ItemRun
from texnorm.records.models import Record
from texnorm.tracking.progress import BaseProgressReporter, LoggingProgressReporter

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


def _safe_report(callback: Callable[..., Any], *args: Any) -> None:
    """Call a reporter hook, logging instead of propagating its errors."""
    try:
        callback(*args)
    except Exception:
        logger.warning("Progress reporter failed", exc_info=True)


class BatchCoordinator:
    """Drive many ArchivePipeline runs in sequential, bounded batches.

    Args:
        pipeline: Per-item pipeline shared by all items (stateless per run).
        resolver: Queue builder and parent → attachment resolver.
        reporter: Progress sink. Logs progress if None.
        batch_size: Maximum number of concurrent items.
    """

    def __init__(
        self,
        pipeline: ArchivePipeline,
        resolver: RecordResolver,
        reporter: BaseProgressReporter | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._pipeline = pipeline
        self._resolver = resolver
        self._reporter = reporter or LoggingProgressReporter()
        self._batch_size = batch_size
        self._cancel_requested = False
        # Resolved archive path -> id of the record that claimed it this run
        self._claimed: dict[Path, str] = {}

    def cancel(self) -> None:
        """Stop before the next batch. Items already running finish normally."""
        self._cancel_requested = True

    async def run(self, records: list[Record]) -> BatchResult:
        """Process a selection of records and return the aggregate result."""
        batch_id = uuid.uuid4().hex[:8]
        set_batch_context(batch_id)
        self._cancel_requested = False
        self._claimed = {}
        start = time.perf_counter()

        queue = self._resolver.build_queue(records)
        result = BatchResult(batch_id=batch_id, total=len(queue))
        if not queue:
            logger.info("No archive records in selection")
            _safe_report(self._reporter.finish, result)
            return result

        batches = [
            queue[i:i + self._batch_size] for i in range(0, len(queue), self._batch_size)
        ]
        _safe_report(self._reporter.start, result.total)

        for index, batch in enumerate(batches):
            if self._cancel_requested:
                result.cancelled = True
                not_started = result.total - result.processed
                result.skipped += not_started
                logger.warning("Cancelled: %d item(s) not started", not_started)
                break

            resolved = await asyncio.gather(
                *(self._resolve_item(entry) for entry in batch), return_exceptions=True,
            )
            # Claimed in queue order: the first selection of an archive owns it
            claimed = [self._claim(entry, item) for entry, item in zip(batch, resolved)]
            settled = await asyncio.gather(
                *(self._process_item(entry, item) for entry, item in zip(batch, claimed)),
                return_exceptions=True,
            )
            for entry, item in zip(batch, settled):
                outcome = item if isinstance(item, ItemOutcome) else _crashed(entry, item)
                result.outcomes.append(outcome)
                if outcome.skipped:
                    result.skipped += 1
                elif outcome.success:
                    result.succeeded += 1
                else:
                    result.failed += 1
            result.processed += len(batch)

            _safe_report(
                self._reporter.update,
                BatchProgress(
                    processed=result.processed,
                    total=result.total,
                    succeeded=result.succeeded,
                    failed=result.failed,
                    batch_index=index + 1,
                    batch_count=len(batches),
                ),
            )

        result.duration_seconds = round(time.perf_counter() - start, 2)
        logger.info(
            "Batch %s complete: %d succeeded, %d failed, %d skipped in %.2fs",
            batch_id, result.succeeded, result.failed, result.skipped, result.duration_seconds,
        )
        _safe_report(self._reporter.finish, result)
        return result

    async def _resolve_item(self, entry: QueueEntry) -> ItemOutcome | _Resolved:
        """Resolve one queue entry to its archive record and canonical path."""
        set_record_context(entry.record.id)
        run = ItemRun(record_id=entry.record.id)
        try:
            record = await self._resolver.resolve(entry)
        except NormalizationError as e:
            run.fail(str(e))
            logger.warning("%s", e, extra={"error_kind": e.kind})
            return ItemOutcome(
                record_id=entry.record.id,
                success=False,
                final_state=run.state,
                reason=str(e),
                error_kind=e.kind,
                states=run.visited,
            )
        key = None
        if record.file_path is not None:
            key = Path(await asyncio.to_thread(os.path.realpath, record.file_path))
        return _Resolved(record=record, run=run, key=key)

    def _claim(
        self, entry: QueueEntry, item: ItemOutcome | _Resolved | BaseException,
    ) -> ItemOutcome | _Resolved | BaseException:
        """Take ownership of the entry's archive, or skip it if already owned."""
        if not isinstance(item, _Resolved) or item.key is None:
            return item
        owner = self._claimed.get(item.key)
        if owner is None:
            self._claimed[item.key] = entry.record.id
            return item
        logger.info("Archive %s already handled by %s in this run, skipping", item.key, owner)
        return ItemOutcome(
            record_id=entry.record.id,
            success=False,
            skipped=True,
            final_state=item.run.state,
            archive_path=item.record.file_path,
            reason=f"archive already processed in this run by {owner}",
            states=item.run.visited,
        )

    async def _process_item(
        self, entry: QueueEntry, item: ItemOutcome | _Resolved | BaseException,
    ) -> ItemOutcome:
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, ItemOutcome):
            return item
        set_record_context(entry.record.id)
        return await self._pipeline.process(item.record, item.run)


class _Resolved(NamedTuple):
    record: Record
    run: ItemRun
    key: Path | None


def _crashed(entry: QueueEntry, error: BaseException) -> ItemOutcome:
    logger.error(
        "Item %s crashed: %r", entry.record.id, error, extra={"error_kind": "UnexpectedError"},
    )
    return ItemOutcome(
        record_id=entry.record.id,
        success=False,
        final_state="failed",
        reason=f"unexpected error: {error}",
        error_kind="UnexpectedError",
    )
