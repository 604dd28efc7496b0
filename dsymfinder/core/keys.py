"""Lookup key composition.

A key joins (identity, version, build) with single spaces after
quoting each component, so no component can contain the separator.
An empty build is stored as ``ANY_BUILD``; its angle brackets are always
escaped by the quoting, so no real build string can produce it.
"""

from __future__ import annotations

from urllib.parse import quote_plus, unquote_plus

ANY_BUILD = "<ANYBUILD>"

_SEPARATOR = " "


def _encode(component: str) -> str:
    return quote_plus(component, safe="")


def compose_key(identity: str, version: str, build: str) -> str:
    """Compose the index key for an identity, version and build.

    An empty ``build`` selects the version-only "any build" key.
    """
    build_component = _encode(build) if build else ANY_BUILD
    return _SEPARATOR.join((_encode(identity), _encode(version), build_component))


def decompose_key(key: str) -> tuple[str, str, str]:
    """Split a key back into (identity, version, build).

    The "any build" sentinel decomposes to an empty build.

    Raises:
        ValueError: If ``key`` was not produced by compose_key().
    """
    parts = key.split(_SEPARATOR)
    if len(parts) != 3:
        raise ValueError(f"Malformed lookup key: {key!r}")

    identity, version, build = parts
    return (
        unquote_plus(identity),
        unquote_plus(version),
        "" if build == ANY_BUILD else unquote_plus(build),
    )


def any_build_key(identity: str, version: str) -> str:
    """Key under which archives without a recorded build are indexed."""
    return compose_key(identity, version, "")
