# tests/unit/pipeline/test_unit_renamer.py — v1
"""Tests for pipeline/renamer.py: copy-then-remove renames."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from texnorm.core.errors import RenameError
from texnorm.core.models import FileEntry, RenameMapping, RenamePair
from texnorm.pipeline.renamer import RenameApplier


def _write(root: Path, files: dict[str, bytes]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name, data in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return root


def _listing(root: Path) -> dict[str, bytes]:
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in root.rglob("*") if p.is_file()}


class TestRenameApplier:
    @pytest.mark.asyncio
    async def test_simple_renames(self, fs, tmp_path: Path):
        root = _write(tmp_path / "t", {"a.tex": b"A", "b.tex": b"B", "fig.png": b"P"})
        mapping = RenameMapping(pairs=[
            RenamePair(source=FileEntry(relative_path="a.tex"), target_name="Main_En.tex"),
            RenamePair(source=FileEntry(relative_path="b.tex"), target_name="SM1_En.tex"),
        ])

        applied = await RenameApplier(fs).apply(root, mapping)

        assert applied == {"a.tex": "Main_En.tex", "b.tex": "SM1_En.tex"}
        assert _listing(root) == {"Main_En.tex": b"A", "SM1_En.tex": b"B", "fig.png": b"P"}

    @pytest.mark.asyncio
    async def test_nested_directories(self, fs, tmp_path: Path):
        root = _write(tmp_path / "t", {"x/a.tex": b"A", "y/b.tex": b"B"})
        mapping = RenameMapping(pairs=[
            RenamePair(source=FileEntry(relative_path="x/a.tex"), target_name="Main_En.tex"),
            RenamePair(source=FileEntry(relative_path="y/b.tex"), target_name="SM1_En.tex"),
        ])
        await RenameApplier(fs).apply(root, mapping)
        assert _listing(root) == {"x/Main_En.tex": b"A", "y/SM1_En.tex": b"B"}

    @pytest.mark.asyncio
    async def test_target_that_is_pending_source_is_not_lost(self, fs, tmp_path: Path):
        # A.tex sorts before Main_En.tex, so the existing main becomes SM1.
        root = _write(tmp_path / "t", {"A.tex": b"new main", "Main_En.tex": b"old main"})
        mapping = RenameMapping(pairs=[
            RenamePair(source=FileEntry(relative_path="A.tex"), target_name="Main_En.tex"),
            RenamePair(source=FileEntry(relative_path="Main_En.tex"), target_name="SM1_En.tex"),
        ])

        await RenameApplier(fs).apply(root, mapping)

        assert _listing(root) == {"Main_En.tex": b"new main", "SM1_En.tex": b"old main"}

    @pytest.mark.asyncio
    async def test_rotation_of_canonical_names(self, fs, tmp_path: Path):
        root = _write(tmp_path / "t", {"SM1_En.tex": b"one", "SM2_En.tex": b"two"})
        mapping = RenameMapping(pairs=[
            RenamePair(source=FileEntry(relative_path="SM1_En.tex"), target_name="Main_En.tex"),
            RenamePair(source=FileEntry(relative_path="SM2_En.tex"), target_name="SM1_En.tex"),
        ])
        await RenameApplier(fs).apply(root, mapping)
        assert _listing(root) == {"Main_En.tex": b"one", "SM1_En.tex": b"two"}

    @pytest.mark.asyncio
    async def test_empty_mapping(self, fs, tmp_path: Path):
        root = _write(tmp_path / "t", {"Main_En.tex": b"M"})
        assert await RenameApplier(fs).apply(root, RenameMapping()) == {}
        assert _listing(root) == {"Main_En.tex": b"M"}

    @pytest.mark.asyncio
    async def test_copy_failure(self, fs, tmp_path: Path):
        root = _write(tmp_path / "t", {"a.tex": b"A"})
        mapping = RenameMapping(pairs=[
            RenamePair(source=FileEntry(relative_path="a.tex"), target_name="Main_En.tex"),
        ])
        with patch.object(fs, "copy_file", side_effect=OSError("read-only")):
            with pytest.raises(RenameError, match="read-only"):
                await RenameApplier(fs).apply(root, mapping)
        assert _listing(root) == {"a.tex": b"A"}

    @pytest.mark.asyncio
    async def test_remove_failure_leaves_both_files(self, fs, tmp_path: Path):
        root = _write(tmp_path / "t", {"a.tex": b"A"})
        mapping = RenameMapping(pairs=[
            RenamePair(source=FileEntry(relative_path="a.tex"), target_name="Main_En.tex"),
        ])
        with patch.object(fs, "remove_file", side_effect=OSError("busy")):
            with pytest.raises(RenameError, match="could not remove"):
                await RenameApplier(fs).apply(root, mapping)
        assert _listing(root) == {"a.tex": b"A", "Main_En.tex": b"A"}
