# src/storage/local_filesystem.py — v1
"""Local filesystem backend (default).

Blocking calls run in worker threads via asyncio.to_thread. File copies
go through a hidden temp sibling followed by os.replace, so a reader of
``dst`` sees either the old bytes or the complete new bytes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path

from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)


class LocalFileSystem(BaseFileSystem):
    """Filesystem operations against the local disk."""

    def __init__(self, temp_root: str | Path | None = None) -> None:
        """Initialize with an optional temp root.

        Args:
            temp_root: Directory for working trees and candidate archives.
                Defaults to the system temp directory.
        """
        self._temp_root = Path(temp_root).expanduser() if temp_root else Path(tempfile.gettempdir())

    @property
    def temp_root(self) -> Path:
        return self._temp_root

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def is_file(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    async def is_dir(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).is_dir)

    async def real_path(self, path: Path) -> Path:
        return Path(await asyncio.to_thread(os.path.realpath, path))

    async def list_dir(self, path: Path) -> list[str]:
        return await asyncio.to_thread(os.listdir, path)

    async def make_dirs(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def write_bytes(self, path: Path, data: bytes) -> None:
        await asyncio.to_thread(Path(path).write_bytes, data)

    async def read_bytes(self, path: Path) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)

    async def file_size(self, path: Path) -> int:
        stat = await asyncio.to_thread(Path(path).stat)
        return stat.st_size

    async def copy_file(self, src: Path, dst: Path) -> None:
        await asyncio.to_thread(_copy_via_temp, Path(src), Path(dst))

    async def remove_file(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).unlink)

    async def remove_tree(self, path: Path) -> None:
        await asyncio.to_thread(shutil.rmtree, path)

    async def make_temp_dir(self, name: str) -> Path:
        path = self._temp_root / name
        await asyncio.to_thread(self._temp_root.mkdir, parents=True, exist_ok=True)
        # exist_ok=False: a working tree is never shared with another run
        await asyncio.to_thread(path.mkdir, mode=0o755)
        return path

    async def temp_file_path(self, name: str) -> Path:
        await asyncio.to_thread(self._temp_root.mkdir, parents=True, exist_ok=True)
        path = self._temp_root / name
        if await self.exists(path):
            raise FileExistsError(f"Temp path already in use: {path}")
        return path


def _copy_via_temp(src: Path, dst: Path) -> None:
    """Copy src to a hidden sibling of dst, then atomically replace dst.

    The sibling name is unique per call, so concurrent copies to the same
    destination never write into each other's temp file.
    """
    fd, name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=dst.parent)
    os.close(fd)
    temp_path = Path(name)
    try:
        shutil.copyfile(src, temp_path)
        shutil.copymode(src, temp_path)
        os.replace(temp_path, dst)
    except BaseException:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.debug("Could not remove partial copy %s: %s", temp_path, cleanup_error)
        raise
