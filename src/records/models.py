# src/records/models.py — v1
"""Record store models: Record."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class Record(BaseModel):
    """A handle in the host's item store.

    ``attachment`` records carry a file; ``regular`` records are
    containers whose attachments are listed in ``child_ids``; ``note``
    records are never processed.
    """

    id: str
    key: str
    title: str = ""
    kind: Literal["attachment", "regular", "note"] = "attachment"
    content_type: str | None = None
    file_path: Path | None = None
    parent_id: str | None = None
    child_ids: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @property
    def is_attachment(self) -> bool:
        return self.kind == "attachment"

    @property
    def is_note(self) -> bool:
        return self.kind == "note"

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags
