# src/api/facade.py — v2
"""Public API facade: normalize one archive or a selection of records.

Usage:
    from texnorm.api.facade import normalize_archive, normalize_records
    outcome = await normalize_archive("paper/Tex_Source.zip")
    result = await normalize_records(["/papers/a", "/papers/b/Tex_Source.zip"])
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from texnorm.archive.codec_factory import create_codec
from texnorm.config.settings import Settings
from texnorm.core.errors import RecordNotFoundError
from texnorm.pipeline.archive_pipeline import ArchivePipeline
from texnorm.pipeline.models import ItemOutcome
from texnorm.records.directory_store import DirectoryRecordStore
from texnorm.records.store_factory import create_record_store
from texnorm.storage.local_filesystem import LocalFileSystem

if TYPE_CHECKING:
    from texnorm.batch.models import BatchResult
    from texnorm.records.base_record_store import BaseRecordStore
    from texnorm.tracking.progress import BaseProgressReporter

logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings, store: BaseRecordStore) -> ArchivePipeline:
    """Wire the local filesystem and the configured codec into a pipeline."""
    return ArchivePipeline(
        fs=LocalFileSystem(temp_root=settings.temp_root),
        codec=create_codec(settings.archive_extension),
        store=store,
        settings=settings,
    )


async def normalize_archive(
    path: str | Path,
    settings: Settings | None = None,
    store: BaseRecordStore | None = None,
) -> ItemOutcome:
    """Normalize a single archive on disk.

    The archive is looked up as a record whose id is its resolved path,
    in a DirectoryRecordStore unless ``store`` is given.

    Returns:
        ItemOutcome. Failures are reported on the outcome, never raised.
    """
    settings = settings or Settings()
    store = store or DirectoryRecordStore(tag_store_path=settings.tag_store_path)
    record_id = DirectoryRecordStore.record_id_for(path)

    try:
        record = await store.get(record_id)
    except RecordNotFoundError as e:
        logger.error("%s", e)
        return ItemOutcome(
            record_id=record_id,
            success=False,
            final_state="failed",
            archive_path=Path(path),
            reason=str(e),
            error_kind=e.kind,
        )

    return await build_pipeline(settings, store).process(record)


async def normalize_records(
    record_ids: list[str],
    settings: Settings | None = None,
    store: BaseRecordStore | None = None,
    reporter: BaseProgressReporter | None = None,
) -> BatchResult:
    """Normalize every archive record reachable from a selection.

    Args:
        record_ids: Selected record ids (attachments or containers).
        settings: Global settings. Loaded from .env if None.
        store: Record store. Built from RECORD_STORE if None.
        reporter: Progress sink. Progress is logged if None.
    """
    from texnorm.batch.coordinator import BatchCoordinator
    from texnorm.batch.resolver import RecordResolver

    settings = settings or Settings()
    store = store or create_record_store(settings)
    resolver = RecordResolver(
        store,
        content_type=settings.archive_content_type,
        name_marker=settings.archive_name_marker,
    )
    coordinator = BatchCoordinator(
        pipeline=build_pipeline(settings, store),
        resolver=resolver,
        reporter=reporter,
        batch_size=settings.batch_size,
    )
    records = await resolver.load(record_ids)
    return await coordinator.run(records)
