# src/pipeline/classifier.py — v1
"""Find normalizable files in a working tree and detect prior normalization.

An archive is already normalized when exactly one file is named
``Main_En.tex`` and every other normalizable file matches
``SM<digits>_En.tex``. Mixed naming (exactly one of those two conditions
holds) is reported as partially normalized; it is only logged, and the
planner still renames everything.
"""

from __future__ import annotations

import locale
import logging
import re
from pathlib import Path
from typing import Callable, Literal

from texnorm.core.errors import ExtractionError, NoNormalizableFilesError
from texnorm.core.models import ClassificationResult, FileEntry
from texnorm.pipeline.tree import TreeCycleError, walk_files
from texnorm.storage.base_filesystem import BaseFileSystem

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".tex"
DEFAULT_MAIN_NAME = "Main_En.tex"
DEFAULT_SUPPLEMENT_PATTERN = re.compile(r"^SM\d+_En\.tex$")


def leaf_sort_key(collation: Literal["ordinal", "locale"]) -> Callable[[FileEntry], object]:
    """Sort key over leaf names: plain code-point order, or the current locale."""
    if collation == "locale":
        return lambda entry: locale.strxfrm(entry.leaf_name)
    return lambda entry: entry.leaf_name


class TexFileClassifier:
    """Classify the files of a working tree.

    Args:
        fs: Filesystem capability.
        extension: Normalizable extension, matched case-insensitively.
        main_name: Canonical main file name.
        supplement_pattern: Regex a canonical supplement leaf name matches.
        collation: "ordinal" (reference) or "locale".
    """

    def __init__(
        self,
        fs: BaseFileSystem,
        extension: str = DEFAULT_EXTENSION,
        main_name: str = DEFAULT_MAIN_NAME,
        supplement_pattern: re.Pattern[str] = DEFAULT_SUPPLEMENT_PATTERN,
        collation: Literal["ordinal", "locale"] = "ordinal",
    ) -> None:
        self._fs = fs
        self._extension = extension.lower()
        self._main_name = main_name
        self._supplement_pattern = supplement_pattern
        self._sort_key = leaf_sort_key(collation)

    def is_normalizable(self, name: str) -> bool:
        return name.lower().endswith(self._extension)

    async def classify(self, root: Path) -> ClassificationResult:
        """Walk ``root`` and classify its normalizable files.

        Raises:
            NoNormalizableFilesError: The tree holds no normalizable file.
            ExtractionError: The tree contains a directory cycle or cannot be read.
        """
        try:
            paths = await walk_files(self._fs, root)
        except TreeCycleError as e:
            raise ExtractionError(str(e)) from e
        except OSError as e:
            raise ExtractionError(f"Cannot scan working tree {root}: {e}") from e

        all_entries = [
            FileEntry(relative_path=p, is_normalizable=self.is_normalizable(p.rsplit("/", 1)[-1]))
            for p in paths
        ]
        entries = sorted((e for e in all_entries if e.is_normalizable), key=self._sort_key)

        if not entries:
            raise NoNormalizableFilesError(
                f"No {self._extension} files found among {len(all_entries)} extracted file(s)"
            )

        has_single_main, rest_canonical = self._canonical_conditions(entries)
        result = ClassificationResult(
            entries=entries,
            already_normalized=has_single_main and rest_canonical,
            partially_normalized=has_single_main != rest_canonical,
            total_files=len(all_entries),
        )

        logger.info(
            "Found %d %s file(s) (already_normalized=%s)",
            result.count, self._extension, result.already_normalized,
        )
        if result.partially_normalized:
            logger.warning(
                "Some files are in standardized format, but not all. "
                "Proceeding with full standardization."
            )
        return result

    def _canonical_conditions(self, entries: list[FileEntry]) -> tuple[bool, bool]:
        mains = [e for e in entries if e.leaf_name == self._main_name]
        others = [e for e in entries if e.leaf_name != self._main_name]
        rest_canonical = all(self._supplement_pattern.match(e.leaf_name) for e in others)
        return len(mains) == 1, rest_canonical

