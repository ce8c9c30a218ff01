# src/core/models.py — v2
"""Shared Pydantic domain models for classification and rename planning.

No module redefines these types. All imports come from core.models.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, Field


# === WORKING TREE ===


class FileEntry(BaseModel):
    """A file inside a working tree, addressed relative to the tree root.

    ``relative_path`` always uses forward slashes so entries compare
    equal across platforms and map one-to-one onto archive member names.
    """

    relative_path: str
    is_normalizable: bool = False

    model_config = {"frozen": True}

    @property
    def leaf_name(self) -> str:
        return PurePosixPath(self.relative_path).name

    @property
    def parent(self) -> str:
        """Relative directory of the entry ("" for the tree root)."""
        parent = PurePosixPath(self.relative_path).parent.as_posix()
        return "" if parent == "." else parent

    def sibling(self, name: str) -> str:
        """Relative path of ``name`` in the same directory as this entry."""
        return f"{self.parent}/{name}" if self.parent else name


class ClassificationResult(BaseModel):
    """Outcome of scanning a working tree for normalizable files."""

    entries: list[FileEntry] = Field(default_factory=list)
    already_normalized: bool = False
    partially_normalized: bool = False
    total_files: int = 0

    @property
    def count(self) -> int:
        return len(self.entries)


# === RENAME PLANNING ===


class RenamePair(BaseModel):
    """One planned rename: ``source`` moves to ``target_name`` in its own directory."""

    source: FileEntry
    target_name: str

    model_config = {"frozen": True}

    @property
    def target_path(self) -> str:
        return self.source.sibling(self.target_name)


class RenameMapping(BaseModel):
    """Ordered list of renames computed by the planner.

    Empty when the archive is already normalized or every file already
    carries its canonical name.
    """

    pairs: list[RenamePair] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.pairs

    def as_dict(self) -> dict[str, str]:
        """Source relative path → target relative path."""
        return {p.source.relative_path: p.target_path for p in self.pairs}
