"""Indexer that walks an archive root and maps identities to DWARF files."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from dsymfinder.core.exceptions import DirectoryReadError, ScanTimeoutError
from dsymfinder.core.keys import compose_key
from dsymfinder.core.metadata import read_metadata
from dsymfinder.core.models import ArchiveMetadata, ScanStats
from dsymfinder.core.walker import list_subdirectories

logger = logging.getLogger(__name__)

ListDirs = Callable[[Path], list[Path]]
ReadMetadata = Callable[[Path], ArchiveMetadata | None]
ProgressCallback = Callable[[Path, int], None]

SYMBOL_BUNDLES_FOLDER = "dSYMs"
DWARF_SUBPATH = Path("Contents", "Resources", "DWARF")


def strip_suffix(name: str) -> str:
    """Remove one trailing extension (``Foo.app.dSYM`` -> ``Foo.app``)."""
    stem, dot, _ = name.rpartition(".")
    return stem if dot else name


def binary_name_for_bundle(bundle_name: str) -> str:
    """Name of the binary inside a dSYM bundle (``Foo.app.dSYM`` -> ``Foo``)."""
    return strip_suffix(strip_suffix(bundle_name))


def dwarf_path_for_bundle(bundle: Path) -> Path:
    """Path of the DWARF binary inside a dSYM bundle folder."""
    return bundle / DWARF_SUBPATH / binary_name_for_bundle(bundle.name)


def _present(path: Path) -> bool:
    """Whether ``path`` exists; an entry that cannot even be stat()ed counts as present."""
    try:
        return path.exists()
    except OSError:
        return True


class ArchiveIndexer:
    """Builds a symbol index from a root of Xcode archives.

    Expected layout::

        <root>/<date folder>/<build folder>/Info.plist
        <root>/<date folder>/<build folder>/dSYMs/<name>.app.dSYM/...
    """

    def __init__(
        self,
        list_dirs: ListDirs = list_subdirectories,
        read_metadata: ReadMetadata = read_metadata,
    ) -> None:
        """Initialize with the directory-listing and metadata collaborators."""
        self._list_dirs = list_dirs
        self._read_metadata = read_metadata

        self.index: dict[str, Path] = {}
        self.stats = ScanStats()

    def scan(
        self,
        root: Path,
        deadline: float | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, Path]:
        """Scan every archive under ``root``.

        Failures to list ``root`` or one of its date folders abort the scan.
        Anything that goes wrong inside a single build folder only skips that
        folder.

        Args:
            root: Archive root directory
            deadline: Optional ``time.monotonic()`` value after which the scan stops
            on_progress: Optional callback for progress updates (build folder, count)

        Returns:
            Mapping from lookup key to absolute DWARF path

        Raises:
            DirectoryReadError: If the root or a date folder cannot be listed
            ScanTimeoutError: If the deadline passes before the scan finishes
        """
        self.index = {}
        self.stats = ScanStats()
        root = root.expanduser().absolute()
        started = time.monotonic()

        logger.info(f"Scanning archives in {root}")
        try:
            for date_folder in self._list_dirs(root):
                self.stats.date_folders += 1

                for build_folder in self._list_dirs(date_folder):
                    if deadline is not None and time.monotonic() > deadline:
                        raise ScanTimeoutError(
                            f"Scan of {root} timed out after {self.stats.build_folders} build folders"
                        )

                    self.stats.build_folders += 1
                    self._scan_build_folder(build_folder)

                    if on_progress:
                        on_progress(build_folder, self.stats.build_folders)
        finally:
            self.stats.duration = time.monotonic() - started

        logger.info(f"Scanned {root}: {self.stats!r}")
        return self.index

    def _scan_build_folder(self, build_folder: Path) -> None:
        """Register every symbol bundle of one archive."""
        metadata = self._read_metadata(build_folder)
        if metadata is None:
            logger.debug(f"No usable metadata in {build_folder}, skipping")
            self.stats.skipped += 1
            return

        self.stats.archives += 1

        bundles_folder = build_folder / SYMBOL_BUNDLES_FOLDER
        try:
            bundles = self._list_dirs(bundles_folder)
        except DirectoryReadError as e:
            # Not every archive carries symbol bundles.
            if _present(bundles_folder):
                logger.warning(f"Skipping symbol bundles: {e}")
                self.stats.errors.append(str(e))
            return

        for bundle in bundles:
            self.stats.bundles += 1
            dwarf_path = dwarf_path_for_bundle(bundle)

            self._register(
                compose_key(binary_name_for_bundle(bundle.name), metadata.version, metadata.build),
                dwarf_path,
            )

            # Main application binary: also reachable by bundle identifier.
            if strip_suffix(bundle.name) == metadata.binary_name:
                self._register(
                    compose_key(metadata.bundle_identifier, metadata.version, metadata.build),
                    dwarf_path,
                )

    def _register(self, key: str, dwarf_path: Path) -> None:
        """Add a key, the later archive winning on collision."""
        previous = self.index.get(key)
        if previous is not None and previous != dwarf_path:
            self.stats.collisions += 1
            logger.debug(f"Key {key!r} now maps to {dwarf_path} (was {previous})")
        elif previous is None:
            self.stats.keys += 1
        self.index[key] = dwarf_path
