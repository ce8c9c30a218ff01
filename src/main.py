# src/main.py — v2
"""CLI entry point: normalize and batch commands.

Usage:
    texnorm normalize <archive.zip> [options]
    texnorm batch <path> [<path> ...] [options]

A batch path is either a ``*Tex_Source.zip`` archive or a directory,
in which case its first ``*Tex_Source.zip`` file is processed.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from texnorm.config.settings import ConfigurationError, Settings
from texnorm.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns 0 only when every item succeeded."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except (ConfigurationError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="texnorm",
        description=f"texnorm v{__version__}: normalize LaTeX source archives",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- normalize ---
    p_normalize = subparsers.add_parser(
        "normalize", help="Normalize a single archive in place",
    )
    p_normalize.add_argument("archive", type=Path, help="Path to the .zip archive")
    p_normalize.set_defaults(func=_cmd_normalize)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Normalize archives for several archives or directories",
    )
    p_batch.add_argument(
        "paths", nargs="+", type=Path, help="Archives or directories holding one",
    )
    p_batch.add_argument(
        "--batch-size", type=int, default=None,
        help="Items processed concurrently (default: BATCH_SIZE or 10)",
    )
    p_batch.set_defaults(func=_cmd_batch)

    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if getattr(args, "batch_size", None) is not None:
        overrides["batch_size"] = args.batch_size
    return Settings(**overrides)  # type: ignore[arg-type]


async def _cmd_normalize(args: argparse.Namespace, settings: Settings) -> int:
    """Normalize one archive."""
    from texnorm.api.facade import normalize_archive

    outcome = await normalize_archive(args.archive, settings=settings)
    if not outcome.success:
        print(f"Failed: {outcome.reason}", file=sys.stderr)
        return 1

    if outcome.already_normalized:
        print("Files already in standardized format, no renaming needed")
    for source, target in outcome.renamed.items():
        print(f"  {source} -> {target}")
    print(f"Normalized {args.archive.name} (backup: {outcome.backup_path})")
    for warning in outcome.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return 0


async def _cmd_batch(args: argparse.Namespace, settings: Settings) -> int:
    """Normalize every archive reachable from the given paths."""
    from texnorm.api.facade import normalize_records
    from texnorm.records.directory_store import DirectoryRecordStore

    record_ids = [DirectoryRecordStore.record_id_for(p) for p in args.paths]
    result = await normalize_records(
        record_ids,
        settings=settings,
        store=DirectoryRecordStore(tag_store_path=settings.tag_store_path),
    )

    print(f"\n{result.summary_message()}")
    print(f"  Items:     {result.total}")
    print(f"  Succeeded: {result.succeeded}")
    print(f"  Failed:    {result.failed}")
    if result.skipped:
        print(f"  Skipped:   {result.skipped}")
    print(f"  Duration:  {result.duration_seconds:.1f}s")
    for outcome in result.outcomes:
        if outcome.skipped:
            print(f"  - {outcome.record_id}: {outcome.reason}")
        elif not outcome.success:
            print(f"  ! {outcome.record_id}: {outcome.reason}", file=sys.stderr)
    return 0 if result.status == "all_succeeded" else 1


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure the texnorm logger for CLI usage."""
    from texnorm.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
