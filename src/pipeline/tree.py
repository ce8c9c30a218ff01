# src/pipeline/tree.py — v1
"""Deterministic recursive walk of a working tree.

At each level sub-directories come first, then files, each group in
lexicographic order. Depth is bounded only by the real tree; a directory
reached twice through symlinks raises TreeCycleError instead of looping.
"""

from __future__ import annotations

from pathlib import Path

from texnorm.storage.base_filesystem import BaseFileSystem


class TreeCycleError(OSError):
    """Raised when a directory is visited twice during one walk."""


async def walk_files(fs: BaseFileSystem, root: Path) -> list[str]:
    """Return posix paths, relative to ``root``, of every file below it."""
    files: list[str] = []
    visited: set[Path] = set()
    await _walk(fs, root, "", files, visited)
    return files


async def _walk(
    fs: BaseFileSystem,
    directory: Path,
    prefix: str,
    files: list[str],
    visited: set[Path],
) -> None:
    real = await fs.real_path(directory)
    if real in visited:
        raise TreeCycleError(f"Directory cycle detected at {directory}")
    visited.add(real)

    dirs: list[str] = []
    leaves: list[str] = []
    for name in sorted(await fs.list_dir(directory)):
        if await fs.is_dir(directory / name):
            dirs.append(name)
        else:
            leaves.append(name)

    for name in dirs:
        await _walk(fs, directory / name, f"{prefix}{name}/", files, visited)
    files.extend(f"{prefix}{name}" for name in leaves)
