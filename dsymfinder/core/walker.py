"""Directory listing helpers used by the archive scan."""

from __future__ import annotations

import logging
from pathlib import Path

from dsymfinder.core.exceptions import DirectoryReadError

logger = logging.getLogger(__name__)


def list_subdirectories(path: Path) -> list[Path]:
    """List the immediate subdirectories of a directory.

    Files are excluded. Symlinks to directories count as directories.
    Entries that disappear or cannot be stat'ed while listing are skipped.

    Returns:
        Subdirectory paths sorted by name; empty if there are none.

    Raises:
        DirectoryReadError: If ``path`` itself cannot be listed.
    """
    try:
        children = list(path.iterdir())
    except OSError as e:
        raise DirectoryReadError(path, e.strerror or str(e)) from e

    directories = []
    for child in children:
        try:
            if child.is_dir():
                directories.append(child)
        except OSError as e:
            logger.debug(f"Skipping {child}: {e}")

    directories.sort(key=lambda p: p.name)
    return directories
