# src/records/base_record_store.py — v1
"""Abstract record store: lookup, attachment listing, tag persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from texnorm.records.models import Record


class BaseRecordStore(ABC):
    """Unified interface for the host application's item store."""

    @abstractmethod
    async def get(self, record_id: str) -> Record:
        """Return the record, raising RecordNotFoundError if absent."""

    @abstractmethod
    async def children(self, record_id: str) -> list[Record]:
        """Attachments of a container record, in the store's order."""

    @abstractmethod
    async def add_tag(self, record_id: str, tag: str) -> None:
        """Stage a tag on the record (no-op if already present)."""

    @abstractmethod
    async def save(self, record_id: str) -> None:
        """Persist staged changes of the record."""
