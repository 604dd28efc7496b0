"""Shared fixtures for building archive trees."""

import plistlib
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

from dsymfinder.core.indexer import binary_name_for_bundle

ArchiveBuilder = Callable[..., Path]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


def application_plist(
    app_path: str | None = "Applications/MyApp.app",
    identifier: str | None = "com.example.myapp",
    version: str | None = "1.2",
    build: str | None = "7",
) -> dict[str, object]:
    """Info.plist contents as Xcode writes them; None leaves a field out."""
    properties: dict[str, object] = {}
    if app_path is not None:
        properties["ApplicationPath"] = app_path
    if identifier is not None:
        properties["CFBundleIdentifier"] = identifier
    if version is not None:
        properties["CFBundleShortVersionString"] = version
    if build is not None:
        properties["CFBundleVersion"] = build
    return {"ApplicationProperties": properties, "Name": "MyApp", "SchemeName": "MyApp"}


@pytest.fixture
def build_archive(temp_dir: Path) -> ArchiveBuilder:
    """Return a function that writes one archive under ``temp_dir / "Archives"``."""
    root = temp_dir / "Archives"

    def _build(
        date: str = "2024-03-01",
        name: str = "MyApp 01.03.24, 10.00.xcarchive",
        plist: dict[str, object] | bytes | None = None,
        bundles: tuple[str, ...] = ("MyApp.app.dSYM",),
        with_dsyms_folder: bool = True,
    ) -> Path:
        build_folder = root / date / name
        build_folder.mkdir(parents=True)

        if isinstance(plist, bytes):
            (build_folder / "Info.plist").write_bytes(plist)
        elif plist is not None:
            with open(build_folder / "Info.plist", "wb") as f:
                plistlib.dump(plist, f)

        if with_dsyms_folder:
            (build_folder / "dSYMs").mkdir()
        for bundle in bundles:
            dwarf_dir = build_folder / "dSYMs" / bundle / "Contents" / "Resources" / "DWARF"
            dwarf_dir.mkdir(parents=True)
            (dwarf_dir / binary_name_for_bundle(bundle)).write_bytes(b"\xcf\xfa\xed\xfe")

        return build_folder

    root.mkdir()
    return _build


def dwarf_path(build_folder: Path, bundle: str) -> Path:
    """Expected DWARF path of a bundle in an archive."""
    return (
        build_folder / "dSYMs" / bundle / "Contents" / "Resources" / "DWARF"
        / binary_name_for_bundle(bundle)
    )
