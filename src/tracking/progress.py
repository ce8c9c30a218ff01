# src/tracking/progress.py — v1
"""Batch progress reporters.

The coordinator is the only caller, so reporters never see concurrent
updates.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from texnorm.batch.models import BatchProgress, BatchResult

logger = logging.getLogger(__name__)


class BaseProgressReporter(ABC):
    """Receives coarse, monotonic progress from the batch coordinator."""

    def start(self, total: int) -> None:
        """Called once before the first batch starts."""

    @abstractmethod
    def update(self, progress: BatchProgress) -> None:
        """Called after every completed batch."""

    @abstractmethod
    def finish(self, result: BatchResult) -> None:
        """Called once with the final result."""


class LoggingProgressReporter(BaseProgressReporter):
    """Report progress through the texnorm logger."""

    def start(self, total: int) -> None:
        logger.info("Processing %d item(s)", total)

    def update(self, progress: BatchProgress) -> None:
        logger.info("%s (%d%%)", progress.message(), progress.percent)

    def finish(self, result: BatchResult) -> None:
        level = logging.INFO if result.status in ("all_succeeded", "empty") else logging.WARNING
        logger.log(level, "%s", result.summary_message())


class CallbackProgressReporter(BaseProgressReporter):
    """Forward progress to plain callables (e.g. a host UI)."""

    def __init__(
        self,
        on_update: Callable[[BatchProgress], None],
        on_finish: Callable[[BatchResult], None] | None = None,
    ) -> None:
        self._on_update = on_update
        self._on_finish = on_finish

    def update(self, progress: BatchProgress) -> None:
        self._on_update(progress)

    def finish(self, result: BatchResult) -> None:
        if self._on_finish is not None:
            self._on_finish(result)
