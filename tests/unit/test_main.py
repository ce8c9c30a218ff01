# tests/unit/test_main.py — v2
"""Tests for main.py: CLI entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from texnorm.batch.models import BatchResult
from texnorm.main import _build_parser, main
from texnorm.pipeline.models import ItemOutcome


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self, capsys):
        parser = _build_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "texnorm" in capsys.readouterr().out

    def test_normalize_subcommand(self):
        args = _build_parser().parse_args(["normalize", "paper/Tex_Source.zip"])
        assert args.command == "normalize"
        assert args.archive == Path("paper/Tex_Source.zip")

    def test_batch_subcommand(self):
        args = _build_parser().parse_args(["-v", "batch", "a", "b", "--batch-size", "4"])
        assert args.command == "batch"
        assert args.paths == [Path("a"), Path("b")]
        assert args.batch_size == 4
        assert args.verbose

    def test_batch_requires_paths(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["batch"])


# ---------------------------------------------------------------------------
# main() tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TAG_STORE_PATH", str(tmp_path / "tags.json"))
    monkeypatch.setenv("TEMP_ROOT", str(tmp_path / "work"))
    yield
    import logging
    root = logging.getLogger("texnorm")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_invalid_batch_size(self, capsys):
        assert main(["batch", "x", "--batch-size", "0"]) == 2
        assert "BATCH_SIZE" in capsys.readouterr().err

    def test_normalize_success(self, make_zip, capsys):
        archive = make_zip({"paper.tex": b"p"})
        assert main(["normalize", str(archive)]) == 0
        assert "paper.tex -> Main_En.tex" in capsys.readouterr().out

    def test_normalize_failure(self, tmp_path: Path, capsys):
        bogus = tmp_path / "Tex_Source.zip"
        bogus.write_text("nope")
        assert main(["normalize", str(bogus)]) == 1
        assert "Failed" in capsys.readouterr().err

    def test_batch_exit_code_follows_status(self):
        partial = BatchResult(batch_id="b", total=2, processed=2, succeeded=1, failed=1)
        with patch("texnorm.api.facade.normalize_records", AsyncMock(return_value=partial)):
            assert main(["batch", "a", "b"]) == 1

    def test_batch_all_succeeded(self, capsys):
        ok = BatchResult(
            batch_id="b", total=1, processed=1, succeeded=1,
            outcomes=[ItemOutcome(record_id="x", success=True, final_state="done")],
        )
        with patch("texnorm.api.facade.normalize_records", AsyncMock(return_value=ok)):
            assert main(["batch", "a"]) == 0
        assert "Successfully processed 1 item" in capsys.readouterr().out
