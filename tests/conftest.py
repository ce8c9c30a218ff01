# tests/conftest.py — v3
"""Shared test fixtures for all unit and integration tests.

Provides zip builders, isolated settings, an in-memory record store and
a fully wired ArchivePipeline. All I/O happens below tmp_path.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable

import pytest

from texnorm.archive.zip_codec import ZipArchiveCodec
from texnorm.config.settings import Settings
from texnorm.logging.context import clear_context
from texnorm.pipeline.archive_pipeline import ArchivePipeline
from texnorm.records.memory_store import InMemoryRecordStore
from texnorm.records.models import Record
from texnorm.storage.local_filesystem import LocalFileSystem


# === HELPERS ===


def write_zip(path: Path, members: dict[str, bytes]) -> Path:
    """Write a deflated zip with members in insertion order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return path


def read_zip(path: Path) -> dict[str, bytes]:
    """Return {member name: bytes} for every file member."""
    with zipfile.ZipFile(path) as zf:
        return {i.filename: zf.read(i) for i in zf.infolist() if not i.is_dir()}


def mark_encrypted(path: Path) -> None:
    """Set the 'encrypted' general purpose flag on every entry of a zip."""
    data = bytearray(path.read_bytes())
    for signature, flag_offset in ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8)):
        pos = data.find(signature)
        while pos != -1:
            data[pos + flag_offset] |= 0x1
            pos = data.find(signature, pos + 4)
    path.write_bytes(bytes(data))


def archive_record(
    path: Path,
    record_id: str = "A1",
    key: str = "KEY00001",
    parent_id: str | None = None,
) -> Record:
    return Record(
        id=record_id,
        key=key,
        title=path.name,
        kind="attachment",
        content_type="application/zip",
        file_path=path,
        parent_id=parent_id,
    )


# === FIXTURES ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Factory: make_zip({"a.tex": b"..."}, name="Tex_Source.zip")."""
    def _make(members: dict[str, bytes], name: str = "Tex_Source.zip") -> Path:
        return write_zip(tmp_path / "archives" / name, members)
    return _make


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path: Path, temp_root: Path) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        temp_root=temp_root,
        record_store="memory",
        tag_store_path=tmp_path / "tags.json",
    )


@pytest.fixture
def fs(temp_root: Path) -> LocalFileSystem:
    return LocalFileSystem(temp_root=temp_root)


@pytest.fixture
def codec() -> ZipArchiveCodec:
    return ZipArchiveCodec()


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def pipeline(
    fs: LocalFileSystem,
    codec: ZipArchiveCodec,
    memory_store: InMemoryRecordStore,
    settings: Settings,
) -> ArchivePipeline:
    return ArchivePipeline(fs=fs, codec=codec, store=memory_store, settings=settings)


@pytest.fixture
def zip_contents() -> Callable[[Path], dict[str, bytes]]:
    """Reader: zip_contents(path) -> {member name: bytes}."""
    return read_zip


@pytest.fixture
def make_record() -> Callable[..., Record]:
    """Factory: make_record(path, record_id="A1", key=..., parent_id=None)."""
    return archive_record


@pytest.fixture
def encrypt_zip() -> Callable[[Path], None]:
    """Mutator: encrypt_zip(path) flags every entry as encrypted."""
    return mark_encrypted
