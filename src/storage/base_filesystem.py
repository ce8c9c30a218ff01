# src/storage/base_filesystem.py — v1
"""Abstract filesystem capability used by every pipeline step.

All methods are coroutines so a blocking backend can hand work to a
thread without stalling sibling items of the same batch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class BaseFileSystem(ABC):
    """Unified interface for the filesystem operations the pipeline needs."""

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        """Check if path exists (file or directory)."""

    @abstractmethod
    async def is_file(self, path: Path) -> bool:
        """Check if path is a regular file."""

    @abstractmethod
    async def is_dir(self, path: Path) -> bool:
        """Check if path is a directory (symlinks are followed)."""

    @abstractmethod
    async def real_path(self, path: Path) -> Path:
        """Canonical path with symlinks resolved (used for cycle detection)."""

    @abstractmethod
    async def list_dir(self, path: Path) -> list[str]:
        """Names of the direct children of a directory."""

    @abstractmethod
    async def make_dirs(self, path: Path) -> None:
        """Create a directory and any missing parents."""

    @abstractmethod
    async def write_bytes(self, path: Path, data: bytes) -> None:
        """Write a file, replacing any existing content."""

    @abstractmethod
    async def read_bytes(self, path: Path) -> bytes:
        """Read a whole file."""

    @abstractmethod
    async def file_size(self, path: Path) -> int:
        """Size of a file in bytes."""

    @abstractmethod
    async def copy_file(self, src: Path, dst: Path) -> None:
        """Copy ``src`` to ``dst``, overwriting ``dst`` if it exists."""

    @abstractmethod
    async def remove_file(self, path: Path) -> None:
        """Remove a single file."""

    @abstractmethod
    async def remove_tree(self, path: Path) -> None:
        """Remove a directory and everything below it."""

    @abstractmethod
    async def make_temp_dir(self, name: str) -> Path:
        """Create a fresh directory called ``name`` under the temp root."""

    @abstractmethod
    async def temp_file_path(self, name: str) -> Path:
        """Path for a not-yet-existing file called ``name`` under the temp root."""
