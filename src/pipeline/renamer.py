# src/pipeline/renamer.py — v1
"""Apply a RenameMapping inside a working tree.

Every rename is a copy to the target followed by removal of the source,
so a failure between the two steps leaves both files present. When a
planned target is the current path of a source that has not been renamed
yet, that source is first moved aside to a staging name in its own
directory, so removing an existing target can never destroy pending
content.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from texnorm.core.errors import RenameError
from texnorm.core.models import RenameMapping
from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)


class RenameApplier:
    """Execute planned renames through the filesystem capability."""

    def __init__(self, fs: BaseFileSystem) -> None:
        self._fs = fs

    async def apply(self, root: Path, mapping: RenameMapping) -> dict[str, str]:
        """Rename files under ``root``.

        Returns:
            Original relative path → new relative path for each applied pair.

        Raises:
            RenameError: A copy or remove step failed.
        """
        targets = {pair.target_path for pair in mapping.pairs}
        current: dict[str, Path] = {}

        for pair in mapping.pairs:
            source = pair.source.relative_path
            if source in targets:
                staged = pair.source.sibling(
                    f".{pair.source.leaf_name}.{uuid.uuid4().hex[:8]}.staging"
                )
                await self._move(root / source, root / staged)
                logger.debug("Staged %s -> %s", source, staged)
                current[source] = root / staged
            else:
                current[source] = root / source

        applied: dict[str, str] = {}
        for pair in mapping.pairs:
            source = pair.source.relative_path
            logger.info("Renaming %s -> %s", pair.source.leaf_name, pair.target_name)
            await self._move(current[source], root / pair.target_path)
            applied[source] = pair.target_path
        return applied

    async def _move(self, src: Path, dst: Path) -> None:
        try:
            if await self._fs.exists(dst):
                await self._fs.remove_file(dst)
            await self._fs.copy_file(src, dst)
        except OSError as e:
            raise RenameError(f"Cannot copy {src.name} to {dst.name}: {e}") from e
        try:
            await self._fs.remove_file(src)
        except OSError as e:
            raise RenameError(
                f"Copied {src.name} to {dst.name} but could not remove the source: {e}"
            ) from e
