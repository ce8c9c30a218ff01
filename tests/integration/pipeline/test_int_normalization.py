# tests/integration/pipeline/test_int_normalization.py — v1
"""Integration tests for the archive normalization pipeline.

Covers: pipeline/*, archive/zip_codec.py, storage/local_filesystem.py,
records/memory_store.py. Real zips on disk, no mocks.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


# =====================================================================
#  EXAMPLE SCENARIOS
# =====================================================================

class TestScenarios:

    @pytest.mark.asyncio
    async def test_flat_archive(self, pipeline, memory_store, make_zip, make_record, zip_contents):
        archive = make_zip({"c.tex": b"C", "a.tex": b"A", "b.tex": b"B"})
        record = memory_store.add(make_record(archive))

        outcome = await pipeline.process(record)

        assert outcome.success
        assert zip_contents(archive) == {
            "Main_En.tex": b"A", "SM1_En.tex": b"B", "SM2_En.tex": b"C",
        }
        assert memory_store.saved_tags(record.id) == ["renamed"]
        assert memory_store.save_calls == [record.id]

    @pytest.mark.asyncio
    async def test_already_normalized_archive(
        self, pipeline, memory_store, make_zip, make_record, zip_contents,
    ):
        archive = make_zip({"Main_En.tex": b"M", "SM1_En.tex": b"S"})
        record = memory_store.add(make_record(archive))

        outcome = await pipeline.process(record)

        assert outcome.success
        assert outcome.already_normalized
        assert outcome.renamed == {}
        assert outcome.states[:4] == ["pending", "extracting", "classifying", "already_normalized"]
        assert zip_contents(archive) == {"Main_En.tex": b"M", "SM1_En.tex": b"S"}
        assert memory_store.saved_tags(record.id) == ["renamed"]

    @pytest.mark.asyncio
    async def test_archive_without_tex(self, pipeline, memory_store, make_zip, make_record):
        archive = make_zip({"readme.pdf": b"%PDF"})
        before = archive.read_bytes()
        record = memory_store.add(make_record(archive))

        outcome = await pipeline.process(record)

        assert not outcome.success
        assert outcome.error_kind == "NoNormalizableFilesError"
        assert archive.read_bytes() == before
        assert not archive.with_name(archive.name + ".bak").exists()
        assert memory_store.saved_tags(record.id) == []
        assert record.tags == []

    @pytest.mark.asyncio
    async def test_nested_archive(self, pipeline, memory_store, make_zip, make_record, zip_contents):
        archive = make_zip({
            "docs/intro.tex": b"intro",
            "docs/appendix.tex": b"appendix",
            "docs/fig/plot.png": b"png",
        })
        record = memory_store.add(make_record(archive))

        outcome = await pipeline.process(record)

        assert outcome.success
        assert zip_contents(archive) == {
            "docs/Main_En.tex": b"appendix",
            "docs/SM1_En.tex": b"intro",
            "docs/fig/plot.png": b"png",
        }


# =====================================================================
#  PROPERTIES
# =====================================================================

class TestProperties:

    @pytest.mark.asyncio
    async def test_idempotence(self, pipeline, memory_store, make_zip, make_record, zip_contents):
        archive = make_zip({"z.tex": b"Z", "m.tex": b"M", "sub/k.tex": b"K"})
        record = memory_store.add(make_record(archive))

        first = await pipeline.process(record)
        after_first = zip_contents(archive)
        second = await pipeline.process(record)

        assert first.success and second.success
        assert not first.already_normalized
        assert second.already_normalized
        assert second.renamed == {}
        assert zip_contents(archive) == after_first
        assert memory_store.saved_tags(record.id) == ["renamed"]

    @pytest.mark.asyncio
    async def test_uniqueness_and_contiguity(
        self, pipeline, memory_store, make_zip, make_record, zip_contents,
    ):
        names = [f"part{i:02d}.tex" for i in range(11, -1, -1)]
        archive = make_zip({name: name.encode() for name in names})
        record = memory_store.add(make_record(archive))

        assert (await pipeline.process(record)).success

        contents = zip_contents(archive)
        ordered = sorted(names)
        assert [n for n in contents if n == "Main_En.tex"] == ["Main_En.tex"]
        assert contents["Main_En.tex"] == ordered[0].encode()
        for i, original in enumerate(ordered[1:], start=1):
            assert contents[f"SM{i}_En.tex"] == original.encode()
        assert len(contents) == 12

    @pytest.mark.asyncio
    async def test_backup_fidelity(self, pipeline, memory_store, make_zip, make_record):
        archive = make_zip({"b.tex": b"B" * 5000, "a.tex": b"A" * 5000})
        before = archive.read_bytes()
        record = memory_store.add(make_record(archive))

        outcome = await pipeline.process(record)

        assert outcome.success
        assert outcome.backup_path.read_bytes() == before
        assert archive.read_bytes() != before

    @pytest.mark.asyncio
    async def test_rerun_refreshes_backup(self, pipeline, memory_store, make_zip, make_record):
        archive = make_zip({"a.tex": b"A"})
        record = memory_store.add(make_record(archive))
        await pipeline.process(record)
        normalized = archive.read_bytes()

        outcome = await pipeline.process(record)

        assert outcome.backup_path.read_bytes() == normalized

    @pytest.mark.asyncio
    async def test_no_leftovers_after_success_or_failure(
        self, pipeline, memory_store, make_zip, make_record, temp_root: Path,
    ):
        good = memory_store.add(make_record(make_zip({"a.tex": b"a"}, name="1_Tex_Source.zip"), "G"))
        bad = memory_store.add(make_record(make_zip({"a.md": b"a"}, name="2_Tex_Source.zip"), "B"))

        assert (await pipeline.process(good)).success
        assert not (await pipeline.process(bad)).success

        assert os.listdir(temp_root) == []
        assert sorted(os.listdir(good.file_path.parent)) == [
            "1_Tex_Source.zip", "1_Tex_Source.zip.bak", "2_Tex_Source.zip",
        ]

    @pytest.mark.asyncio
    async def test_concurrent_items_use_separate_trees(
        self, pipeline, memory_store, make_zip, make_record, zip_contents,
    ):
        import asyncio

        records = [
            memory_store.add(make_record(
                make_zip({f"{i}.tex": str(i).encode()}, name=f"{i}_Tex_Source.zip"),
                record_id=f"R{i}", key="SAMEKEY0",
            ))
            for i in range(5)
        ]
        outcomes = await asyncio.gather(*(pipeline.process(r) for r in records))
        assert all(o.success for o in outcomes)
        for i, record in enumerate(records):
            assert zip_contents(record.file_path) == {"Main_En.tex": str(i).encode()}
