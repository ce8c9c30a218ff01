# src/records/store_factory.py — v1
"""Factory: instantiate the record store from configuration."""

from __future__ import annotations

from texnorm.config.settings import Settings
from texnorm.records.base_record_store import BaseRecordStore


def create_record_store(settings: Settings) -> BaseRecordStore:
    """Create the record store selected by RECORD_STORE.

    Raises:
        ValueError: If the store type is not supported.
    """
    if settings.record_store == "directory":
        from texnorm.records.directory_store import DirectoryRecordStore
        return DirectoryRecordStore(tag_store_path=settings.tag_store_path)

    if settings.record_store == "memory":
        from texnorm.records.memory_store import InMemoryRecordStore
        return InMemoryRecordStore()

    raise ValueError(f"Unsupported record store: {settings.record_store!r}")
