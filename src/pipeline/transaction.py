# src/pipeline/transaction.py — v1
"""Backup-then-replace of the original archive, plus ephemeral cleanup.

Order is fixed: the original is copied to ``<name>.bak`` and the copy is
verified before the candidate is copied over the original. A failure in
the first step leaves the original untouched (BackupError); a failure in
the second step is reported as ReplacementError carrying the backup
path. Ephemeral paths registered on the transaction are removed when the
``async with`` block exits, whatever the outcome; removal failures are
downgraded to CleanupWarning.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType

from texnorm.core.errors import BackupError, CleanupWarning, ReplacementError
from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)


def backup_path_for(original: Path, suffix: str = ".bak") -> Path:
    return original.with_name(f"{original.name}{suffix}")


class ReplacementTransaction:
    """Swap a candidate archive in place of the original, keeping a backup.

    Usage:
        async with ReplacementTransaction(fs, original) as txn:
            txn.register_ephemeral(working_tree)
            ...
            await txn.commit(candidate)
        txn.warnings  # cleanup problems, if any
    """

    def __init__(
        self, fs: BaseFileSystem, original: Path, backup_suffix: str = ".bak",
    ) -> None:
        self._fs = fs
        self.original = Path(original)
        self.backup_path = backup_path_for(self.original, backup_suffix)
        self.backup_written = False
        self.replaced = False
        self.warnings: list[str] = []
        self._ephemeral: list[Path] = []

    def register_ephemeral(self, path: Path) -> None:
        """Mark a path owned by this run for removal on exit."""
        self._ephemeral.append(Path(path))

    async def __aenter__(self) -> ReplacementTransaction:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.cleanup()

    async def commit(self, candidate: Path) -> Path:
        """Back up the original, then overwrite it with ``candidate``.

        Returns:
            Path of the backup.
        """
        await self.backup()
        await self.replace(candidate)
        return self.backup_path

    async def backup(self) -> Path:
        try:
            expected = await self._fs.file_size(self.original)
            await self._fs.copy_file(self.original, self.backup_path)
            actual = await self._fs.file_size(self.backup_path)
        except OSError as e:
            raise BackupError(f"Cannot back up {self.original.name}: {e}") from e
        if actual != expected:
            raise BackupError(
                f"Backup of {self.original.name} incomplete: "
                f"{actual} bytes instead of expected {expected}"
            )
        self.backup_written = True
        logger.info("Backed up %s -> %s", self.original.name, self.backup_path.name)
        return self.backup_path

    async def replace(self, candidate: Path) -> None:
        if not self.backup_written:
            raise BackupError("Refusing to replace the original before a backup exists")
        try:
            expected = await self._fs.file_size(candidate)
            await self._fs.copy_file(candidate, self.original)
            actual = await self._fs.file_size(self.original)
        except OSError as e:
            raise ReplacementError(
                f"Cannot replace {self.original.name}: {e}", backup_path=self.backup_path,
            ) from e
        if actual != expected:
            raise ReplacementError(
                f"Replacement of {self.original.name} incomplete: "
                f"{actual} bytes instead of expected {expected}",
                backup_path=self.backup_path,
            )
        self.replaced = True
        logger.info("Replaced %s with normalized archive", self.original.name)

    async def cleanup(self) -> list[str]:
        """Remove every registered ephemeral path, best-effort."""
        while self._ephemeral:
            path = self._ephemeral.pop()
            try:
                if await self._fs.is_dir(path):
                    await self._fs.remove_tree(path)
                elif await self._fs.exists(path):
                    await self._fs.remove_file(path)
            except Exception as e:  # best-effort, never changes the outcome
                warning = CleanupWarning(f"Failed to clean up temporary path {path}: {e}")
                logger.warning("%s", warning)
                self.warnings.append(str(warning))
        return self.warnings
