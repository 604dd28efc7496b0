"""Data models for dsymfinder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any

APPLICATION_PROPERTIES = "ApplicationProperties"


class IndexState(Enum):
    """Lifecycle of a locator's symbol index."""

    UNINITIALIZED = "uninitialized"
    SCANNING = "scanning"
    READY = "ready"


class StalenessPolicy(Enum):
    """What a locator does about archives added after its first scan."""

    # One scan per locator; later archives stay invisible.
    FROZEN = "frozen"
    # Full rescan when a lookup misses and the last scan is old enough.
    RESCAN_ON_MISS = "rescan-on-miss"


def _string_field(properties: dict[str, Any], key: str) -> str:
    value = properties.get(key)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class ArchiveMetadata:
    """Application identity recorded in an archive's Info.plist.

    ``binary_name`` is the basename of the archived application path
    (e.g. ``MyApp.app``), not the bare binary name.
    """

    binary_name: str = ""
    bundle_identifier: str = ""
    version: str = ""
    build: str = ""

    @classmethod
    def from_plist(cls, contents: Any) -> ArchiveMetadata:
        """Create metadata from decoded Info.plist contents.

        Absent or non-string fields become empty strings.
        """
        if not isinstance(contents, dict):
            return cls()
        properties = contents.get(APPLICATION_PROPERTIES)
        if not isinstance(properties, dict):
            return cls()

        application_path = _string_field(properties, "ApplicationPath")
        return cls(
            binary_name=PurePosixPath(application_path).name if application_path else "",
            bundle_identifier=_string_field(properties, "CFBundleIdentifier"),
            version=_string_field(properties, "CFBundleShortVersionString"),
            build=_string_field(properties, "CFBundleVersion"),
        )


@dataclass
class ScanStats:
    """Statistics from one archive scan."""

    date_folders: int = 0
    build_folders: int = 0
    archives: int = 0
    skipped: int = 0
    bundles: int = 0
    keys: int = 0
    collisions: int = 0
    duration: float = 0.0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date_folders": self.date_folders,
            "build_folders": self.build_folders,
            "archives": self.archives,
            "skipped": self.skipped,
            "bundles": self.bundles,
            "keys": self.keys,
            "collisions": self.collisions,
            "duration": round(self.duration, 3),
            "errors": list(self.errors),
        }

    def __repr__(self) -> str:
        return (
            f"ScanStats(archives={self.archives}, bundles={self.bundles}, "
            f"keys={self.keys}, skipped={self.skipped}, "
            f"collisions={self.collisions}, errors={len(self.errors)})"
        )
