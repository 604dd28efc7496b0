"""Lazy, scan-once lookup of DWARF files by application identity."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from dsymfinder.core.exceptions import DsymFinderError
from dsymfinder.core.indexer import ArchiveIndexer
from dsymfinder.core.keys import compose_key, decompose_key
from dsymfinder.core.models import IndexState, ScanStats, StalenessPolicy

if TYPE_CHECKING:
    from dsymfinder.core.settings import Settings

logger = logging.getLogger(__name__)

IndexerFactory = Callable[[], ArchiveIndexer]

_EMPTY_INDEX: Mapping[str, Path] = MappingProxyType({})


class DwarfLocator:
    """Answers (identity, version, build) queries against an archive root.

    The first lookup scans the archive root. Concurrent callers arriving
    while that scan runs wait for it instead of starting their own, and
    every caller then reads the same index. Once ready, the index is an
    immutable mapping read without locking.

    With ``StalenessPolicy.FROZEN`` the index is never rebuilt, so archives
    added after the first scan stay invisible to this locator. With
    ``StalenessPolicy.RESCAN_ON_MISS`` a lookup that finds nothing triggers a
    complete new scan, at most once per ``rescan_interval`` seconds.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        scan_timeout: float | None = None,
        staleness: StalenessPolicy = StalenessPolicy.FROZEN,
        rescan_interval: float = 300.0,
        indexer_factory: IndexerFactory = ArchiveIndexer,
    ) -> None:
        """Initialize with the archive root; no filesystem access happens here.

        Args:
            root: Archive root directory
            scan_timeout: Optional bound, in seconds, on one scan
            staleness: Whether a miss may trigger a fresh scan
            rescan_interval: Minimum seconds between scans under RESCAN_ON_MISS
            indexer_factory: Creates the indexer used for each scan
        """
        self._root = Path(root)
        self._scan_timeout = scan_timeout
        self._staleness = staleness
        self._rescan_interval = rescan_interval
        self._indexer_factory = indexer_factory

        self._condition = threading.Condition()
        self._state = IndexState.UNINITIALIZED
        self._index: Mapping[str, Path] = _EMPTY_INDEX
        self._stats: ScanStats | None = None
        self._scanned_at: float | None = None
        self._scan_error: BaseException | None = None
        self._generation = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> DwarfLocator:
        """Create a locator configured from loaded settings."""
        return cls(
            settings.archives_path,
            scan_timeout=settings.scan_timeout,
            staleness=settings.staleness,
            rescan_interval=settings.rescan_interval,
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def stats(self) -> ScanStats | None:
        """Statistics of the last successful scan, if any."""
        return self._stats

    @property
    def index(self) -> Mapping[str, Path]:
        """Read-only view of the current index (empty before the first scan)."""
        return self._index

    def lookup(self, identity: str, version: str, build: str = "") -> Path | None:
        """Find the DWARF file for an application or framework.

        Tries the exact (identity, version, build) key first, then the
        version-only key of archives that recorded no build number.

        Args:
            identity: Binary name or bundle identifier
            version: Short version string
            build: Build number; empty matches only version-only archives

        Returns:
            Absolute path to the DWARF binary, or None if no archive matches

        Raises:
            DirectoryReadError: If the archive root or a date folder is unreadable
                during the first scan
            ScanTimeoutError: If the first scan exceeds ``scan_timeout``
        """
        self.ensure_index()

        result = self._resolve(identity, version, build)
        if result is None and self._should_rescan():
            try:
                self._scan(force=True)
            except DsymFinderError:
                # The previous index is still complete; a miss stays a miss.
                return None
            result = self._resolve(identity, version, build)
        return result

    def ensure_index(self) -> ScanStats:
        """Scan the archive root unless the index is already ready."""
        if self._state is IndexState.READY and self._stats is not None:
            return self._stats
        return self._scan(force=False)

    def entries(self) -> Iterator[tuple[str, str, str, Path]]:
        """Yield (identity, version, build, path) for every indexed key.

        The build is empty for version-only entries.
        """
        self.ensure_index()
        for key, path in self._index.items():
            identity, version, build = decompose_key(key)
            yield identity, version, build, path

    def _resolve(self, identity: str, version: str, build: str) -> Path | None:
        index = self._index
        result = index.get(compose_key(identity, version, build))
        if result is not None:
            return result
        return index.get(compose_key(identity, version, ""))

    def _should_rescan(self) -> bool:
        if self._staleness is not StalenessPolicy.RESCAN_ON_MISS:
            return False
        scanned_at = self._scanned_at
        return scanned_at is None or time.monotonic() - scanned_at >= self._rescan_interval

    def _scan(self, force: bool) -> ScanStats:
        """Run one scan, or wait for the scan already in flight."""
        with self._condition:
            generation = self._generation
            while self._state is IndexState.SCANNING:
                self._condition.wait()

            if self._generation != generation:
                # Another caller's scan finished while we waited. A failed
                # rescan leaves the previous index READY.
                if self._state is IndexState.READY and self._stats is not None:
                    return self._stats
                if self._scan_error is not None:
                    raise self._scan_error

            if self._state is IndexState.READY and self._stats is not None:
                if not force or not self._should_rescan():
                    return self._stats

            previous_state = self._state
            self._state = IndexState.SCANNING
            self._scan_error = None

        deadline = None
        if self._scan_timeout is not None:
            deadline = time.monotonic() + self._scan_timeout

        try:
            indexer = self._indexer_factory()
            index = indexer.scan(self._root, deadline=deadline)
        except BaseException as e:
            with self._condition:
                # Partial results are discarded; the next lookup retries.
                self._state = previous_state
                self._scan_error = e
                if previous_state is IndexState.READY:
                    self._scanned_at = time.monotonic()
                self._generation += 1
                self._condition.notify_all()
            logger.warning(f"Scan of {self._root} failed: {e}")
            raise

        with self._condition:
            self._index = MappingProxyType(dict(index))
            self._stats = indexer.stats
            self._scanned_at = time.monotonic()
            self._state = IndexState.READY
            self._generation += 1
            self._condition.notify_all()
            return self._stats
