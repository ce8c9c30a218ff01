# src/records/directory_store.py — v2
"""Filesystem-backed record store used by the CLI.

A file path is an attachment record (content type guessed from its
name); a directory is a container record whose files are its
attachments. Tags are kept in one JSON document mapping record id to
tag list, rewritten atomically on save().
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import mimetypes
import os
from pathlib import Path

from texnorm.core.errors import RecordNotFoundError
from texnorm.records.base_record_store import BaseRecordStore
from texnorm.records.models import Record

logger = logging.getLogger(__name__)

mimetypes.add_type("application/zip", ".zip")


class DirectoryRecordStore(BaseRecordStore):
    """Records derived from paths on disk, tags persisted to a JSON file."""

    def __init__(self, tag_store_path: str | Path) -> None:
        self._tag_path = Path(tag_store_path).expanduser()
        self._pending: dict[str, list[str]] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def record_id_for(path: str | Path) -> str:
        return str(Path(path).expanduser().resolve())

    async def get(self, record_id: str) -> Record:
        path, kind = await asyncio.to_thread(_stat_record, record_id)
        if kind is None:
            raise RecordNotFoundError(f"No file or directory at {record_id!r}")
        return self._to_record(path, kind=kind, tags=await self._tags_for(str(path)))

    async def children(self, record_id: str) -> list[Record]:
        parent = await self.get(record_id)
        if parent.is_attachment:
            return []
        files = await asyncio.to_thread(_list_files, Path(parent.id))
        tags = await self._load()
        return [
            self._to_record(p, kind="attachment", tags=tags.get(str(p), []))
            for p in files
        ]

    async def add_tag(self, record_id: str, tag: str) -> None:
        record = await self.get(record_id)
        tags = self._pending.setdefault(record.id, list(record.tags))
        if tag not in tags:
            tags.append(tag)

    async def save(self, record_id: str) -> None:
        record_id = await asyncio.to_thread(self.record_id_for, record_id)
        staged = self._pending.pop(record_id, None)
        if staged is None:
            return
        async with self._lock:
            data = await self._load()
            data[record_id] = staged
            await asyncio.to_thread(self._write, data)
        logger.debug("Saved tags for %s: %s", record_id, staged)

    async def _tags_for(self, record_id: str) -> list[str]:
        if record_id in self._pending:
            return list(self._pending[record_id])
        return (await self._load()).get(record_id, [])

    async def _load(self) -> dict[str, list[str]]:
        if not await asyncio.to_thread(self._tag_path.exists):
            return {}
        try:
            text = await asyncio.to_thread(self._tag_path.read_text, encoding="utf-8")
            data = json.loads(text)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read tag store %s: %s", self._tag_path, e)
            return {}
        return {k: list(v) for k, v in data.items()}

    def _write(self, data: dict[str, list[str]]) -> None:
        self._tag_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._tag_path.with_name(f".{self._tag_path.name}.tmp")
        temp_path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(temp_path, self._tag_path)

    @staticmethod
    def _to_record(path: Path, kind: str, tags: list[str]) -> Record:
        content_type = None
        if kind == "attachment":
            content_type, _ = mimetypes.guess_type(path.name)
        return Record(
            id=str(path),
            key=hashlib.sha1(str(path).encode()).hexdigest()[:8].upper(),
            title=path.name,
            kind=kind,  # type: ignore[arg-type]
            content_type=content_type,
            file_path=path if kind == "attachment" else None,
            parent_id=str(path.parent),
            tags=tags,
        )


def _stat_record(record_id: str) -> tuple[Path, str | None]:
    """Resolve a record id to (absolute path, record kind or None if absent)."""
    path = Path(record_id).expanduser().resolve()
    if path.is_dir():
        return path, "regular"
    if path.is_file():
        return path, "attachment"
    return path, None


def _list_files(directory: Path) -> list[Path]:
    return sorted(p for p in directory.iterdir() if p.is_file())
