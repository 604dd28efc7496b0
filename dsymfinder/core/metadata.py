"""Reading archive metadata from Info.plist."""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path

from dsymfinder.core.exceptions import MetadataParseError
from dsymfinder.core.models import ArchiveMetadata

logger = logging.getLogger(__name__)

METADATA_FILENAME = "Info.plist"


def load_metadata(build_folder: Path) -> ArchiveMetadata | None:
    """Load the metadata of the archive at ``build_folder``.

    Returns:
        The archive metadata, or None if the folder has no Info.plist.

    Raises:
        MetadataParseError: If Info.plist exists but cannot be read or decoded.
    """
    plist_path = build_folder / METADATA_FILENAME
    try:
        if not plist_path.is_file():
            return None

        with open(plist_path, "rb") as f:
            contents = plistlib.load(f)
    except Exception as e:
        # plistlib reports malformed values with assorted builtin exceptions.
        raise MetadataParseError(plist_path, str(e) or type(e).__name__) from e

    return ArchiveMetadata.from_plist(contents)


def read_metadata(build_folder: Path) -> ArchiveMetadata | None:
    """Read archive metadata, treating an undecodable Info.plist as missing."""
    try:
        return load_metadata(build_folder)
    except MetadataParseError as e:
        logger.warning(f"Skipping archive: {e}")
        return None
