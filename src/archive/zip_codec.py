# src/archive/zip_codec.py — v2
"""Zip codec backed by the standard zipfile module.

A reader keeps one ZipFile open, so the central directory is parsed once
per extraction. New archives use ZIP_DEFLATED with the default
compression level.
"""

from __future__ import annotations

import asyncio
import zipfile
from pathlib import Path

from texnorm.archive.base_archive_codec import (
    ArchiveCodecError,
    BaseArchiveCodec,
    BaseArchiveReader,
)
from texnorm.archive.models import ArchiveMember

_ENCRYPTED_FLAG = 0x1


class ZipArchiveReader(BaseArchiveReader):
    """Member access over a single open ZipFile."""

    def __init__(self, archive_path: Path) -> None:
        super().__init__(archive_path)
        self._zf: zipfile.ZipFile | None = None
        self._members: list[ArchiveMember] = []

    @property
    def members(self) -> list[ArchiveMember]:
        return self._members

    async def open(self) -> None:
        self._zf = await asyncio.to_thread(_open, self.archive_path)
        self._members = [
            ArchiveMember(
                name=info.filename,
                is_dir=info.is_dir(),
                size=info.file_size,
                encrypted=bool(info.flag_bits & _ENCRYPTED_FLAG),
            )
            for info in self._zf.infolist()
        ]

    async def read(self, name: str) -> bytes:
        if self._zf is None:
            raise ArchiveCodecError(f"Archive not open: {self.archive_path}")
        try:
            return await asyncio.to_thread(self._zf.read, name)
        except (KeyError, RuntimeError, zipfile.BadZipFile, EOFError) as e:
            # RuntimeError: encrypted member without password
            raise ArchiveCodecError(f"Cannot read {name!r} from {self.archive_path}: {e}") from e

    async def close(self) -> None:
        zf, self._zf = self._zf, None
        if zf is not None:
            await asyncio.to_thread(zf.close)


class ZipArchiveCodec(BaseArchiveCodec):
    """Read and write .zip archives."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".zip"]

    def open_reader(self, archive_path: Path) -> ZipArchiveReader:
        return ZipArchiveReader(Path(archive_path))

    async def write_archive(
        self, archive_path: Path, members: list[tuple[str, Path]],
    ) -> None:
        await asyncio.to_thread(_write_archive, Path(archive_path), members)


def _open(archive_path: Path) -> zipfile.ZipFile:
    if not zipfile.is_zipfile(archive_path):
        raise ArchiveCodecError(f"Not a zip archive: {archive_path}")
    try:
        return zipfile.ZipFile(archive_path, "r")
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        raise ArchiveCodecError(f"Cannot open zip archive {archive_path}: {e}") from e


def _write_archive(archive_path: Path, members: list[tuple[str, Path]]) -> None:
    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, source in members:
                zf.write(source, arcname=name)
    except (OSError, zipfile.LargeZipFile, ValueError) as e:
        raise ArchiveCodecError(f"Cannot write zip archive {archive_path}: {e}") from e
