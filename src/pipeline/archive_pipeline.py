# src/pipeline/archive_pipeline.py — v1
"""Normalize one archive record end to end.

Runs Extracting → Classifying → {AlreadyNormalized | Renaming} →
Packaging → BackingUp → Replacing → Tagging → Done strictly in order.
Every error is converted into an ItemOutcome here, so the batch
coordinator only ever sees a single success flag plus a reason.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path

from texnorm.archive.base_archive_codec import BaseArchiveCodec
from texnorm.config.settings import Settings
from texnorm.core.errors import (
    ExtractionError,
    InvalidInputError,
    NormalizationError,
    ReplacementError,
    TagUpdateError,
)
from texnorm.logging.context import set_record_context
from texnorm.pipeline.builder import ArchiveBuilder
from texnorm.pipeline.classifier import TexFileClassifier
from texnorm.pipeline.extractor import ArchiveExtractor
from texnorm.pipeline.models import ItemOutcome
from texnorm.pipeline.planner import RenamePlanner
from texnorm.pipeline.renamer import RenameApplier
from texnorm.pipeline.state import ItemRun
from texnorm.pipeline.transaction import ReplacementTransaction
from texnorm.records.base_record_store import BaseRecordStore
from texnorm.records.models import Record
from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)


class ArchivePipeline:
    """Per-item normalization pipeline.

    Args:
        fs: Filesystem capability.
        codec: Archive codec capability.
        store: Record store used for the post-replacement tag.
        settings: Naming and archive rules. Defaults are used if None.
    """

    def __init__(
        self,
        fs: BaseFileSystem,
        codec: BaseArchiveCodec,
        store: BaseRecordStore,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or Settings()
        s = self._settings
        self._fs = fs
        self._store = store
        self._extractor = ArchiveExtractor(codec, fs)
        self._classifier = TexFileClassifier(
            fs,
            extension=s.normalizable_extension,
            main_name=s.main_file_name,
            supplement_pattern=s.supplement_pattern,
            collation=s.sort_collation,
        )
        self._planner = RenamePlanner(
            main_name=s.main_file_name, supplement_name=s.supplement_name,
        )
        self._renamer = RenameApplier(fs)
        self._builder = ArchiveBuilder(codec, fs, extension=s.archive_extension)

    async def process(self, record: Record, run: ItemRun | None = None) -> ItemOutcome:
        """Normalize the archive attached to ``record``.

        Never raises for pipeline failures; inspect ``ItemOutcome.success``.
        """
        set_record_context(record.id)
        run = run or ItemRun(record_id=record.id)
        start = time.monotonic()
        outcome = ItemOutcome(
            record_id=record.id,
            success=False,
            final_state=run.state,
            archive_path=record.file_path,
        )
        txn: ReplacementTransaction | None = None

        try:
            archive_path = await self._validate_input(record)
            txn = ReplacementTransaction(
                self._fs, archive_path, backup_suffix=self._settings.backup_suffix,
            )
            async with txn:
                await self._normalize(record, archive_path, run, txn, outcome)
            outcome.success = True
        except NormalizationError as e:
            if not run.is_terminal:
                run.fail(str(e))
            outcome.reason = str(e)
            outcome.error_kind = e.kind
            if isinstance(e, ReplacementError):
                outcome.backup_path = e.backup_path
                outcome.backup_preserved = e.backup_preserved
            logger.error(
                "Processing failed (%s): %s", e.kind, e,
                extra={"error_kind": e.kind, "archive": record.file_path},
            )
        except Exception as e:
            if not run.is_terminal:
                run.fail(f"unexpected error: {e}")
            outcome.reason = f"unexpected error: {e}"
            outcome.error_kind = "UnexpectedError"
            logger.exception(
                "Unexpected error while processing %s", record.id,
                extra={"error_kind": "UnexpectedError", "archive": record.file_path},
            )

        if txn is not None:
            outcome.warnings.extend(txn.warnings)
        outcome.final_state = run.state
        outcome.states = run.visited
        outcome.duration_ms = int((time.monotonic() - start) * 1000)
        if outcome.success:
            logger.info("File processing completed successfully")
        return outcome

    async def _validate_input(self, record: Record) -> Path:
        path = record.file_path
        if path is None:
            raise InvalidInputError(f"Record {record.id} has no file path")
        if path.suffix.lower() != self._settings.archive_extension.lower():
            raise InvalidInputError(f"File is not a {self._settings.archive_extension} file: {path.name}")
        if not await self._fs.is_file(path):
            raise InvalidInputError(f"Archive not found or not a regular file: {path}")
        return path

    async def _normalize(
        self,
        record: Record,
        archive_path: Path,
        run: ItemRun,
        txn: ReplacementTransaction,
        outcome: ItemOutcome,
    ) -> None:
        run.advance("extracting")
        try:
            tree = await self._fs.make_temp_dir(f"{uuid.uuid4().hex[:12]}-{record.key}")
        except OSError as e:
            raise ExtractionError(f"Cannot create working tree: {e}") from e
        txn.register_ephemeral(tree)
        await self._extractor.extract(archive_path, tree)

        run.advance("classifying")
        result = await self._classifier.classify(tree)

        if result.already_normalized:
            run.advance("already_normalized")
            outcome.already_normalized = True
            logger.info("Files already in standardized format, no renaming needed")
        else:
            run.advance("renaming")
            mapping = self._planner.plan(result)
            outcome.renamed = await self._renamer.apply(tree, mapping)

        run.advance("packaging")
        candidate = await self._builder.candidate_path()
        txn.register_ephemeral(candidate)
        await self._builder.build(tree, candidate)

        run.advance("backing_up")
        outcome.backup_path = await txn.backup()

        run.advance("replacing")
        await txn.replace(candidate)

        run.advance("tagging")
        outcome.tagged = await self._tag(record, outcome)

        run.advance("done")

    async def _tag(self, record: Record, outcome: ItemOutcome) -> bool:
        """Add the processed tag; failures are reported but never fatal."""
        tag = self._settings.processed_tag
        try:
            await self._store.add_tag(record.id, tag)
            await self._store.save(record.id)
        except Exception as e:  # external store: any failure is non-fatal here
            warning = TagUpdateError(f"Failed to add tag {tag!r}: {e}")
            logger.warning("%s", warning)
            outcome.warnings.append(str(warning))
            return False
        logger.info("Added %r tag", tag)
        return True
