# src/records/memory_store.py — v1
"""In-memory record store for tests and embedding applications."""

from __future__ import annotations

from texnorm.core.errors import RecordNotFoundError
from texnorm.records.base_record_store import BaseRecordStore
from texnorm.records.models import Record


class InMemoryRecordStore(BaseRecordStore):
    """Dict-backed store. Tags become visible to ``saved_tags`` only after save()."""

    def __init__(self, records: list[Record] | None = None) -> None:
        self._records: dict[str, Record] = {}
        self._saved: dict[str, list[str]] = {}
        self.save_calls: list[str] = []
        for record in records or []:
            self.add(record)

    def add(self, record: Record) -> Record:
        """Insert a record and link it into its parent's children."""
        self._records[record.id] = record
        self._saved[record.id] = list(record.tags)
        if record.parent_id and record.parent_id in self._records:
            parent = self._records[record.parent_id]
            if record.id not in parent.child_ids:
                parent.child_ids.append(record.id)
        return record

    def saved_tags(self, record_id: str) -> list[str]:
        return list(self._saved.get(record_id, []))

    async def get(self, record_id: str) -> Record:
        try:
            return self._records[record_id]
        except KeyError:
            raise RecordNotFoundError(f"No record with id {record_id!r}") from None

    async def children(self, record_id: str) -> list[Record]:
        parent = await self.get(record_id)
        return [self._records[c] for c in parent.child_ids if c in self._records]

    async def add_tag(self, record_id: str, tag: str) -> None:
        record = await self.get(record_id)
        if tag not in record.tags:
            record.tags.append(tag)

    async def save(self, record_id: str) -> None:
        record = await self.get(record_id)
        self._saved[record_id] = list(record.tags)
        self.save_calls.append(record_id)
