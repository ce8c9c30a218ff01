# src/batch/models.py — v2
"""Batch processing models: QueueEntry, BatchProgress, BatchResult."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field

from texnorm.pipeline.models import ItemOutcome
from texnorm.records.models import Record

BatchStatus = Literal["all_succeeded", "partial_success", "total_failure", "empty"]


def progress_percent(processed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up (10 of 12 → 83)."""
    if total <= 0:
        return 100
    return math.floor(processed * 100 / total + 0.5)


class QueueEntry(BaseModel):
    """One selected record waiting to be processed."""

    record: Record
    is_parent: bool = False


class BatchProgress(BaseModel):
    """Snapshot reported after each batch completes."""

    processed: int
    total: int
    succeeded: int
    failed: int
    batch_index: int
    batch_count: int

    @property
    def percent(self) -> int:
        return progress_percent(self.processed, self.total)

    def message(self) -> str:
        return f"Processing: {self.processed}/{self.total} items"


class BatchResult(BaseModel):
    """Summary result of one coordinator run."""

    batch_id: str
    total: int
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    cancelled: bool = False
    outcomes: list[ItemOutcome] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def status(self) -> BatchStatus:
        if self.total == 0:
            return "empty"
        if self.succeeded > 0 and self.failed == 0:
            return "all_succeeded"
        if self.succeeded > 0:
            return "partial_success"
        return "total_failure"

    def summary_message(self) -> str:
        """One-line user-facing summary of the run."""
        plural = "s" if self.succeeded != 1 else ""
        if self.status == "empty":
            return "Nothing to process"
        if self.status == "all_succeeded":
            return f"Successfully processed {self.succeeded} item{plural}"
        if self.status == "partial_success":
            return f"Processed {self.succeeded} item{plural}, {self.failed} failed"
        return "Processing failed for all items"
