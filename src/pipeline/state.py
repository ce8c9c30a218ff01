# src/pipeline/state.py — v2
"""Per-item state machine for one archive pipeline run.

Pending → Extracting → Classifying → {AlreadyNormalized | Renaming} →
Packaging → BackingUp → Replacing → Tagging → Done, with Failed
reachable from every non-terminal state. Runs are not resumable: a
retry starts a new ItemRun at Pending.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from texnorm.logging.context import set_state_context

ItemState = Literal[
    "pending",
    "extracting",
    "classifying",
    "already_normalized",
    "renaming",
    "packaging",
    "backing_up",
    "replacing",
    "tagging",
    "done",
    "failed",
]

TERMINAL_STATES: frozenset[str] = frozenset({"done", "failed"})

TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"extracting"}),
    "extracting": frozenset({"classifying"}),
    "classifying": frozenset({"already_normalized", "renaming"}),
    "already_normalized": frozenset({"packaging"}),
    "renaming": frozenset({"packaging"}),
    "packaging": frozenset({"backing_up"}),
    "backing_up": frozenset({"replacing"}),
    "replacing": frozenset({"tagging"}),
    "tagging": frozenset({"done"}),
    "done": frozenset(),
    "failed": frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when a run attempts a transition the state machine forbids."""


class StateTransition(BaseModel):
    """One entry of a run's state history."""

    state: ItemState
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ItemRun(BaseModel):
    """Tracks the state of a single item through the pipeline."""

    record_id: str
    state: ItemState = "pending"
    failure_reason: str | None = None
    history: list[StateTransition] = Field(
        default_factory=lambda: [StateTransition(state="pending")]
    )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def visited(self) -> list[str]:
        return [t.state for t in self.history]

    def advance(self, state: ItemState) -> None:
        """Move to ``state``, enforcing the allowed transitions."""
        if state == "failed":
            raise InvalidTransitionError("use fail() to enter the failed state")
        if state not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"{self.state} -> {state} is not allowed")
        self._enter(state)

    def fail(self, reason: str) -> None:
        """Enter the terminal failed state from any non-terminal state."""
        if self.is_terminal:
            raise InvalidTransitionError(f"{self.state} is terminal, cannot fail")
        self.failure_reason = reason
        self._enter("failed")

    def _enter(self, state: ItemState) -> None:
        self.state = state
        self.history.append(StateTransition(state=state))
        set_state_context(state)
