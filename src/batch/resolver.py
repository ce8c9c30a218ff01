# src/batch/resolver.py — v1
"""Turn a selection of records into a processing queue.

A selected attachment is queued directly when it is an archive record
(content type plus name marker). A selected container is queued as a
parent and resolved, at processing time, to its first matching
attachment. Other attachments and notes are dropped from the queue.
"""

from __future__ import annotations

import logging

from texnorm.batch.models import QueueEntry
from texnorm.core.errors import RecordNotFoundError, UnresolvedRecordError
from texnorm.records.base_record_store import BaseRecordStore
from texnorm.records.models import Record

logger = logging.getLogger(__name__)


class RecordResolver:
    """Match archive records by content type and title marker."""

    def __init__(
        self,
        store: BaseRecordStore,
        content_type: str = "application/zip",
        name_marker: str = "Tex_Source.zip",
    ) -> None:
        self._store = store
        self._content_type = content_type
        self._marker = name_marker

    def is_archive_record(self, record: Record) -> bool:
        return (
            record.is_attachment
            and record.content_type == self._content_type
            and self._marker in record.title
        )

    async def load(self, record_ids: list[str]) -> list[Record]:
        """Fetch records by id, skipping (and logging) unknown ids."""
        records: list[Record] = []
        for record_id in record_ids:
            try:
                records.append(await self._store.get(record_id))
            except RecordNotFoundError as e:
                logger.warning("Skipping selection entry: %s", e)
        return records

    def build_queue(self, records: list[Record]) -> list[QueueEntry]:
        queue: list[QueueEntry] = []
        for record in records:
            if self.is_archive_record(record):
                queue.append(QueueEntry(record=record, is_parent=False))
            elif not record.is_attachment and not record.is_note:
                queue.append(QueueEntry(record=record, is_parent=True))
            else:
                logger.debug("Not queued (not an archive record): %s", record.title or record.id)
        return queue

    async def find_archive_attachment(self, parent: Record) -> Record | None:
        """First child attachment that is an archive record, or None."""
        if parent.is_attachment:
            return None
        for child in await self._store.children(parent.id):
            if self.is_archive_record(child):
                return child
        return None

    async def resolve(self, entry: QueueEntry) -> Record:
        """Archive record to process for a queue entry.

        Raises:
            UnresolvedRecordError: Parent has no matching attachment.
        """
        if not entry.is_parent:
            return entry.record
        attachment = await self.find_archive_attachment(entry.record)
        if attachment is None:
            raise UnresolvedRecordError(
                f"No {self._marker} attachment found for {entry.record.title or entry.record.id}"
            )
        return attachment
