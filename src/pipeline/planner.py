# src/pipeline/planner.py — v1
"""Compute the source → canonical name mapping for a classified tree."""

from __future__ import annotations

import logging
from typing import Callable

from texnorm.core.models import ClassificationResult, RenameMapping, RenamePair

logger = logging.getLogger(__name__)


def default_supplement_name(index: int) -> str:
    return f"SM{index}_En.tex"


class RenamePlanner:
    """Plan canonical names: first sorted entry is the main file, the rest
    are supplements numbered from 1 in sorted order.

    Each target lives in the same directory as its source. Pairs whose
    source already carries its target name are omitted.
    """

    def __init__(
        self,
        main_name: str = "Main_En.tex",
        supplement_name: Callable[[int], str] = default_supplement_name,
    ) -> None:
        self._main_name = main_name
        self._supplement_name = supplement_name

    def target_names(self, count: int) -> list[str]:
        """Canonical names for ``count`` files, in assignment order."""
        if count <= 0:
            return []
        return [self._main_name] + [self._supplement_name(i) for i in range(1, count)]

    def plan(self, result: ClassificationResult) -> RenameMapping:
        if result.already_normalized:
            return RenameMapping()

        pairs = [
            RenamePair(source=entry, target_name=target)
            for entry, target in zip(result.entries, self.target_names(result.count))
            if entry.leaf_name != target
        ]
        logger.debug("Planned %d rename(s) for %d file(s)", len(pairs), result.count)
        return RenameMapping(pairs=pairs)
