# tests/unit/pipeline/test_unit_builder.py — v1
"""Tests for pipeline/builder.py: repackaging a working tree."""

from __future__ import annotations

import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from texnorm.core.errors import PackagingError
from texnorm.pipeline.builder import ArchiveBuilder


class TestArchiveBuilder:
    @pytest.mark.asyncio
    async def test_candidate_path_under_temp_root(self, codec, fs, temp_root: Path):
        path = await ArchiveBuilder(codec, fs).candidate_path()
        assert path.parent == temp_root
        assert path.suffix == ".zip"
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_candidate_paths_are_distinct(self, codec, fs):
        builder = ArchiveBuilder(codec, fs)
        assert await builder.candidate_path() != await builder.candidate_path()

    @pytest.mark.asyncio
    async def test_build_preserves_tree(self, codec, fs, tmp_path: Path, zip_contents):
        root = tmp_path / "tree"
        (root / "figs").mkdir(parents=True)
        (root / "Main_En.tex").write_bytes(b"main")
        (root / "SM1_En.tex").write_bytes(b"sm1")
        (root / "figs" / "a.png").write_bytes(b"png")
        out = tmp_path / "out.zip"

        members = await ArchiveBuilder(codec, fs).build(root, out)

        assert members == ["figs/a.png", "Main_En.tex", "SM1_En.tex"]
        with zipfile.ZipFile(out) as zf:
            assert zf.namelist() == members
        assert zip_contents(out) == {
            "figs/a.png": b"png", "Main_En.tex": b"main", "SM1_En.tex": b"sm1",
        }

    @pytest.mark.asyncio
    async def test_write_failure(self, codec, fs, tmp_path: Path):
        root = tmp_path / "tree"
        root.mkdir()
        (root / "a.tex").write_text("x")
        with pytest.raises(PackagingError, match="candidate"):
            await ArchiveBuilder(codec, fs).build(root, tmp_path / "no-such-dir" / "out.zip")

    @pytest.mark.asyncio
    async def test_reserve_failure(self, codec, fs):
        with patch.object(fs, "temp_file_path", side_effect=OSError("no space")):
            with pytest.raises(PackagingError, match="no space"):
                await ArchiveBuilder(codec, fs).candidate_path()
