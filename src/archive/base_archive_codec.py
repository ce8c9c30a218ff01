# src/archive/base_archive_codec.py — v2
"""Abstract archive codec: open a reader over members, write new archives.

Compression itself is left to the concrete codec.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from texnorm.archive.models import ArchiveMember


class ArchiveCodecError(Exception):
    """Raised when an archive is unreadable, unsupported, or cannot be written."""


class BaseArchiveReader(ABC):
    """One open archive. Use as ``async with codec.open_reader(path) as reader``."""

    def __init__(self, archive_path: Path) -> None:
        self.archive_path = Path(archive_path)

    @property
    @abstractmethod
    def members(self) -> list[ArchiveMember]:
        """Every member of the archive in stored order."""

    @abstractmethod
    async def open(self) -> None:
        """Open the archive and load its member listing."""

    @abstractmethod
    async def read(self, name: str) -> bytes:
        """Return the decompressed bytes of one member."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying handle. Safe to call twice."""

    async def __aenter__(self) -> BaseArchiveReader:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class BaseArchiveCodec(ABC):
    """Unified interface for archive formats."""

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """File extensions this codec handles (e.g., ['.zip'])."""

    @abstractmethod
    def open_reader(self, archive_path: Path) -> BaseArchiveReader:
        """Reader over ``archive_path``; nothing is opened until entered."""

    async def list_members(self, archive_path: Path) -> list[ArchiveMember]:
        """List every member of the archive in stored order."""
        async with self.open_reader(archive_path) as reader:
            return list(reader.members)

    @abstractmethod
    async def write_archive(
        self, archive_path: Path, members: list[tuple[str, Path]],
    ) -> None:
        """Create a new archive at ``archive_path``.

        Args:
            archive_path: Destination, must not be an existing archive in use.
            members: (member name, source file) pairs, inserted in order.
        """
