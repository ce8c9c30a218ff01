# src/pipeline/builder.py — v1
"""Repackage a working tree into a new candidate archive."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from texnorm.archive.base_archive_codec import ArchiveCodecError, BaseArchiveCodec
from texnorm.core.errors import PackagingError
from texnorm.pipeline.tree import TreeCycleError, walk_files
from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)


class ArchiveBuilder:
    """Write every file of a tree, at its relative path, into a fresh archive.

    Entry order follows walk_files (directories first, then files,
    lexicographic per level), so identical trees yield structurally
    identical archives.
    """

    def __init__(
        self, codec: BaseArchiveCodec, fs: BaseFileSystem, extension: str = ".zip",
    ) -> None:
        self._codec = codec
        self._fs = fs
        self._extension = extension

    async def candidate_path(self) -> Path:
        """Reserve a fresh temporary path for a candidate archive."""
        try:
            return await self._fs.temp_file_path(f"{uuid.uuid4().hex}{self._extension}")
        except OSError as e:
            raise PackagingError(f"Cannot reserve a temporary archive path: {e}") from e

    async def build(self, root: Path, archive_path: Path) -> list[str]:
        """Build ``archive_path`` from the tree at ``root``.

        Returns:
            Member names in insertion order.

        Raises:
            PackagingError: Directory cycle, unreadable tree, or write failure.
        """
        try:
            members = await walk_files(self._fs, root)
        except TreeCycleError as e:
            raise PackagingError(str(e)) from e
        except OSError as e:
            raise PackagingError(f"Cannot scan working tree {root}: {e}") from e

        try:
            await self._codec.write_archive(
                archive_path, [(name, root.joinpath(*name.split("/"))) for name in members],
            )
        except (ArchiveCodecError, OSError) as e:
            raise PackagingError(f"Cannot write candidate archive: {e}") from e

        logger.info("Packaged %d file(s) into %s", len(members), archive_path.name)
        return members
