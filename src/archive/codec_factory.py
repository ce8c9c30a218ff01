# src/archive/codec_factory.py — v1
"""Factory: instantiate an archive codec from a file extension."""

from __future__ import annotations

from texnorm.archive.base_archive_codec import BaseArchiveCodec
from texnorm.archive.zip_codec import ZipArchiveCodec

# Registry maps extension → codec class.
_CODEC_REGISTRY: dict[str, type[BaseArchiveCodec]] = {}


def _register_defaults() -> None:
    """Register built-in codecs."""
    for cls in [ZipArchiveCodec]:
        instance = cls()
        for ext in instance.supported_extensions:
            _CODEC_REGISTRY[ext.lower()] = cls


_register_defaults()


class UnsupportedArchiveError(ValueError):
    """Raised when no codec is available for an extension."""


def create_codec(extension: str) -> BaseArchiveCodec:
    """Create a codec for the given archive extension.

    Args:
        extension: File extension with or without the dot (".zip", "zip").

    Raises:
        UnsupportedArchiveError: If no codec is registered.
    """
    ext = extension.lower()
    if not ext.startswith("."):
        ext = f".{ext}"

    cls = _CODEC_REGISTRY.get(ext)
    if cls is None:
        raise UnsupportedArchiveError(
            f"No codec for archive format {ext!r}. "
            f"Supported: {', '.join(sorted(_CODEC_REGISTRY))}"
        )
    return cls()


def register_codec(extension: str, cls: type[BaseArchiveCodec]) -> None:
    """Register a custom codec for an extension."""
    _CODEC_REGISTRY[extension.lower()] = cls
