"""dsymfinder custom exceptions."""

from __future__ import annotations

from pathlib import Path


class DsymFinderError(Exception):
    """Base exception for dsymfinder errors."""


class DirectoryReadError(DsymFinderError):
    """A directory could not be listed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read directory {path}: {reason}")
        self.path = path


class MetadataParseError(DsymFinderError):
    """An archive's Info.plist exists but could not be decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot decode {path}: {reason}")
        self.path = path


class ScanTimeoutError(DsymFinderError):
    """Archive scan did not finish within its time bound."""


class ConfigurationError(DsymFinderError):
    """Invalid settings file or setting value."""
