# src/archive/models.py — v1
"""Archive codec models: ArchiveMember."""

from __future__ import annotations

from pydantic import BaseModel


class ArchiveMember(BaseModel):
    """A single entry listed from an archive's directory."""

    name: str
    is_dir: bool = False
    size: int = 0
    encrypted: bool = False
