# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for naming rules, batch sizing, record matching
and logging. Every component receives a Settings instance (or the
individual values it needs) at construction time.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Batch ===
    batch_size: int = 10

    # === Naming scheme ===
    normalizable_extension: str = ".tex"
    main_file_name: str = "Main_En.tex"
    supplement_prefix: str = "SM"
    supplement_suffix: str = "_En.tex"
    sort_collation: Literal["ordinal", "locale"] = "ordinal"

    # === Archive records ===
    archive_extension: str = ".zip"
    archive_content_type: str = "application/zip"
    archive_name_marker: str = "Tex_Source.zip"
    processed_tag: str = "renamed"
    backup_suffix: str = ".bak"

    # === Ephemeral state ===
    temp_root: Path | None = None

    # === Record store ===
    record_store: Literal["directory", "memory"] = "directory"
    tag_store_path: Path = Path("~/.texnorm/tags.json")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("normalizable_extension", "archive_extension", "backup_suffix")
    @classmethod
    def validate_dotted(cls, v: str) -> str:  # noqa: N805
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"extension must start with '.': {v!r}")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.batch_size < 1:
            errors.append("BATCH_SIZE must be >= 1")

        if not self.main_file_name.lower().endswith(self.normalizable_extension.lower()):
            errors.append(
                "MAIN_FILE_NAME must carry the NORMALIZABLE_EXTENSION "
                f"({self.normalizable_extension})"
            )

        if not self.supplement_suffix.lower().endswith(self.normalizable_extension.lower()):
            errors.append("SUPPLEMENT_SUFFIX must end with NORMALIZABLE_EXTENSION")

        if self.supplement_pattern.match(self.main_file_name):
            errors.append("MAIN_FILE_NAME must not match the supplement pattern")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def supplement_pattern(self) -> re.Pattern[str]:
        """Compiled ``SM<digits>_En.tex`` pattern for the configured affixes."""
        return re.compile(
            rf"^{re.escape(self.supplement_prefix)}\d+{re.escape(self.supplement_suffix)}$"
        )

    def supplement_name(self, index: int) -> str:
        """Canonical name of the index-th supplement file (1-based)."""
        return f"{self.supplement_prefix}{index}{self.supplement_suffix}"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
