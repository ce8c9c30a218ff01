# src/pipeline/models.py — v1
"""Pipeline result models: ItemOutcome."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from texnorm.pipeline.state import ItemState


class ItemOutcome(BaseModel):
    """Single result reported by one item pipeline to the coordinator."""

    record_id: str
    success: bool
    final_state: ItemState
    # Not run because another item of the same run owns the archive
    skipped: bool = False
    archive_path: Path | None = None
    reason: str | None = None
    error_kind: str | None = None
    already_normalized: bool = False
    renamed: dict[str, str] = Field(default_factory=dict)
    backup_path: Path | None = None
    backup_preserved: bool = False
    tagged: bool = False
    warnings: list[str] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)
    duration_ms: int = 0
