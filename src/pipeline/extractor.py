# src/pipeline/extractor.py — v2
"""Unpack an archive into a working tree, keeping relative paths.

Directory members are skipped; their directories are recreated on
demand when a file below them is written. The original archive is only
ever read here.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from texnorm.archive.base_archive_codec import (
    ArchiveCodecError,
    BaseArchiveCodec,
    BaseArchiveReader,
)
from texnorm.core.errors import ExtractionError
from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)


def safe_member_path(name: str) -> PurePosixPath | None:
    """Normalize a member name, or return None if it escapes the tree root.

    Backslashes are treated as separators since archives created on
    Windows sometimes store them.
    """
    if "\x00" in name:
        return None
    parts: list[str] = []
    for part in name.replace("\\", "/").split("/"):
        if part in ("", "."):
            continue
        if part == ".." or part.endswith(":"):
            return None
        parts.append(part)
    if not parts or name.startswith(("/", "\\")):
        return None
    return PurePosixPath(*parts)


class ArchiveExtractor:
    """Extract every file member of an archive into a destination root."""

    def __init__(self, codec: BaseArchiveCodec, fs: BaseFileSystem) -> None:
        self._codec = codec
        self._fs = fs

    async def extract(self, archive_path: Path, dest_root: Path) -> list[str]:
        """Extract the archive.

        Args:
            archive_path: Archive to read.
            dest_root: Existing, empty working tree root.

        Returns:
            Relative (posix) paths of the files written, in archive order.

        Raises:
            ExtractionError: Archive unreadable, not a recognized format,
                unsafe or encrypted member, or a file could not be written.
        """
        try:
            async with self._codec.open_reader(archive_path) as reader:
                return await self._extract_members(reader, dest_root)
        except ArchiveCodecError as e:
            raise ExtractionError(str(e)) from e
        except OSError as e:
            raise ExtractionError(f"Cannot open archive {archive_path}: {e}") from e

    async def _extract_members(self, reader: BaseArchiveReader, dest_root: Path) -> list[str]:
        created_dirs: set[PurePosixPath] = set()
        written: list[str] = []

        for member in reader.members:
            if member.is_dir or member.name.endswith("/"):
                continue

            rel = safe_member_path(member.name)
            if rel is None:
                raise ExtractionError(f"Unsafe member path in archive: {member.name!r}")
            if member.encrypted:
                raise ExtractionError(f"Encrypted member not supported: {member.name!r}")

            parent = rel.parent
            if parent != PurePosixPath(".") and parent not in created_dirs:
                try:
                    await self._fs.make_dirs(dest_root.joinpath(*parent.parts))
                except OSError as e:
                    raise ExtractionError(f"Cannot create directory {parent}: {e}") from e
                created_dirs.add(parent)

            data = await reader.read(member.name)
            try:
                await self._fs.write_bytes(dest_root.joinpath(*rel.parts), data)
            except OSError as e:
                raise ExtractionError(f"Cannot write {rel}: {e}") from e

            written.append(rel.as_posix())
            logger.debug("Extracted: %s", rel)

        logger.info("Extracted %d file(s) from %s", len(written), reader.archive_path.name)
        return written
