# src/core/errors.py — v1
"""Error taxonomy for the archive normalization pipeline.

Fatal errors abort a single item and are converted into a failed
ItemOutcome by the item pipeline. TagUpdateError and CleanupWarning are
non-fatal: they are logged and recorded on the outcome but never change
whether the item succeeded.
"""

from __future__ import annotations

from pathlib import Path


class NormalizationError(Exception):
    """Base class for every error raised by texnorm components."""

    fatal = True

    @property
    def kind(self) -> str:
        """Stable error kind reported to the batch coordinator."""
        return type(self).__name__


class InvalidInputError(NormalizationError):
    """Archive path is missing, not a regular file, or has the wrong extension."""


class ExtractionError(NormalizationError):
    """Archive could not be opened, is not a zip, or an entry could not be written."""


class NoNormalizableFilesError(NormalizationError):
    """Working tree contains no file with the normalizable extension."""


class RenameError(NormalizationError):
    """A copy-then-remove rename step failed inside the working tree."""


class PackagingError(NormalizationError):
    """Candidate archive could not be written."""


class BackupError(NormalizationError):
    """Backup copy of the original archive could not be written or verified.

    The original archive is untouched when this is raised.
    """


class ReplacementError(NormalizationError):
    """Candidate archive could not be copied over the original.

    Raised only after the backup was written, so the pre-run bytes remain
    available at ``backup_path``.
    """

    def __init__(self, message: str, backup_path: Path, backup_preserved: bool = True) -> None:
        self.backup_path = Path(backup_path)
        self.backup_preserved = backup_preserved
        note = f"backup preserved at {self.backup_path}" if backup_preserved else "backup unavailable"
        super().__init__(f"{message} ({note})")


class RecordNotFoundError(NormalizationError):
    """Record store has no record with the requested id."""


class UnresolvedRecordError(NormalizationError):
    """Parent record has no archive attachment matching the marker."""


class TagUpdateError(NormalizationError):
    """Tag could not be added to or saved on the record (non-fatal)."""

    fatal = False


class CleanupWarning(NormalizationError):
    """Ephemeral working tree or candidate archive could not be removed (non-fatal)."""

    fatal = False
