"""
Core module: archive scanning, lookup keys and the DWARF locator.

Models (models.py):
    - ArchiveMetadata: Identity recorded in an archive's Info.plist
    - ScanStats: Counters from one archive scan
    - IndexState/StalenessPolicy: Locator lifecycle and rescan policy

Exceptions (exceptions.py):
    - DsymFinderError: Base exception for all dsymfinder errors
    - DirectoryReadError: Archive root or date folder could not be listed
    - MetadataParseError: Info.plist exists but could not be decoded
    - ScanTimeoutError: Scan exceeded its time bound

Scanning:
    - list_subdirectories (walker.py): Immediate subdirectories of a folder
    - read_metadata (metadata.py): Archive metadata, None when unusable
    - compose_key (keys.py): Index key with "any build" sentinel
    - ArchiveIndexer (indexer.py): One full scan of an archive root
    - DwarfLocator (locator.py): Lazy, scan-once lookups
"""

from dsymfinder.core.exceptions import (
    ConfigurationError,
    DirectoryReadError,
    DsymFinderError,
    MetadataParseError,
    ScanTimeoutError,
)
from dsymfinder.core.indexer import ArchiveIndexer, binary_name_for_bundle
from dsymfinder.core.keys import ANY_BUILD, compose_key, decompose_key
from dsymfinder.core.locator import DwarfLocator
from dsymfinder.core.metadata import load_metadata, read_metadata
from dsymfinder.core.models import ArchiveMetadata, IndexState, ScanStats, StalenessPolicy
from dsymfinder.core.settings import Settings, get_default_archives_path, load_settings
from dsymfinder.core.walker import list_subdirectories

__all__ = [
    # Models
    "ArchiveMetadata",
    "IndexState",
    "ScanStats",
    "StalenessPolicy",
    # Exceptions
    "DsymFinderError",
    "DirectoryReadError",
    "MetadataParseError",
    "ScanTimeoutError",
    "ConfigurationError",
    # Scanning
    "ANY_BUILD",
    "ArchiveIndexer",
    "DwarfLocator",
    "binary_name_for_bundle",
    "compose_key",
    "decompose_key",
    "list_subdirectories",
    "load_metadata",
    "read_metadata",
    # Settings
    "Settings",
    "get_default_archives_path",
    "load_settings",
]
