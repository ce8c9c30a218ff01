# src/logging/context.py — v2
"""Contextual logging support: attach batch_id, record_id, state to log records.

Each item pipeline runs in its own asyncio task, and every task gets a
copy of the current context, so values set inside one item never leak
into a sibling item.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_record_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "record_id", default=None
)
_state: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "state", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    batch_id: str | None = None
    record_id: str | None = None
    state: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        batch_id=_batch_id.get(),
        record_id=_record_id.get(),
        state=_state.get(),
    )


def set_batch_context(batch_id: str) -> None:
    """Set batch-level context (called once per coordinator run)."""
    _batch_id.set(batch_id)


def set_record_context(record_id: str) -> None:
    """Set item-level context (called at the start of each item task)."""
    _record_id.set(record_id)
    _state.set(None)


def set_state_context(state: str | None) -> None:
    """Record the pipeline state the current item is in."""
    _state.set(state)


def clear_context() -> None:
    """Reset all context variables."""
    _batch_id.set(None)
    _record_id.set(None)
    _state.set(None)
