"""Configuration for dsymfinder.

Settings are layered: built-in defaults, then the ``[dsymfinder]`` table of a
TOML config file, then ``DSYMFINDER_*`` environment variables.

Example config file::

    [dsymfinder]
    archives_path = "~/Library/Developer/Xcode/Archives"
    scan_timeout = 60
    staleness = "frozen"

    [dsymfinder.logging]
    level = "INFO"
    path = "/tmp/dsymfinder.log"
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from dsymfinder.core.exceptions import ConfigurationError
from dsymfinder.core.models import StalenessPolicy

ENV_ARCHIVES = "DSYMFINDER_ARCHIVES"
ENV_SCAN_TIMEOUT = "DSYMFINDER_SCAN_TIMEOUT"
ENV_STALENESS = "DSYMFINDER_STALENESS"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_default_archives_path() -> Path:
    """Get the directory where Xcode stores archives."""
    return Path.home() / "Library" / "Developer" / "Xcode" / "Archives"


def get_default_config_path() -> Path:
    """Get the default config file location."""
    return Path.home() / ".config" / "dsymfinder" / "config.toml"


@dataclass(frozen=True)
class Settings:
    """Resolved dsymfinder settings."""

    archives_path: Path = field(default_factory=get_default_archives_path)
    scan_timeout: float | None = None
    staleness: StalenessPolicy = StalenessPolicy.FROZEN
    rescan_interval: float = 300.0
    log_level: str | None = None
    log_file: Path | None = None


def _parse_timeout(value: Any, source: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{source}: scan timeout must be a number, got {value!r}") from e
    if timeout <= 0:
        raise ConfigurationError(f"{source}: scan timeout must be positive, got {value!r}")
    return timeout


def _parse_staleness(value: Any, source: str) -> StalenessPolicy:
    try:
        return StalenessPolicy(value)
    except ValueError as e:
        choices = ", ".join(p.value for p in StalenessPolicy)
        raise ConfigurationError(f"{source}: staleness must be one of {choices}, got {value!r}") from e


def _parse_interval(value: Any, source: str) -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{source}: rescan interval must be a number, got {value!r}") from e
    if interval < 0:
        raise ConfigurationError(f"{source}: rescan interval must not be negative, got {value!r}")
    return interval


def _apply_table(settings: Settings, table: Mapping[str, Any], source: str) -> Settings:
    """Overlay values from the ``[dsymfinder]`` TOML table."""
    changes: dict[str, Any] = {}

    if "archives_path" in table:
        if not isinstance(table["archives_path"], str):
            raise ConfigurationError(f"{source}: archives_path must be a string")
        changes["archives_path"] = Path(table["archives_path"]).expanduser()
    if "scan_timeout" in table:
        changes["scan_timeout"] = _parse_timeout(table["scan_timeout"], source)
    if "staleness" in table:
        changes["staleness"] = _parse_staleness(table["staleness"], source)
    if "rescan_interval" in table:
        changes["rescan_interval"] = _parse_interval(table["rescan_interval"], source)

    log_table = table.get("logging", {})
    if not isinstance(log_table, dict):
        raise ConfigurationError(f"{source}: [dsymfinder.logging] must be a table")
    if "level" in log_table:
        changes["log_level"] = str(log_table["level"]).upper()
    if "path" in log_table:
        changes["log_file"] = Path(str(log_table["path"])).expanduser()

    return replace(settings, **changes)


def _apply_environment(settings: Settings, environ: Mapping[str, str]) -> Settings:
    changes: dict[str, Any] = {}

    if environ.get(ENV_ARCHIVES):
        changes["archives_path"] = Path(environ[ENV_ARCHIVES]).expanduser()
    if ENV_SCAN_TIMEOUT in environ:
        changes["scan_timeout"] = _parse_timeout(environ[ENV_SCAN_TIMEOUT], ENV_SCAN_TIMEOUT)
    if environ.get(ENV_STALENESS):
        changes["staleness"] = _parse_staleness(environ[ENV_STALENESS], ENV_STALENESS)

    return replace(settings, **changes)


def load_settings(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from defaults, a TOML file and the environment.

    Args:
        config_file: TOML file to read; must exist if given. When omitted the
            default config path is used if it exists.
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid values
    """
    settings = Settings()

    if config_file is None:
        default_path = get_default_config_path()
        if default_path.is_file():
            config_file = default_path

    if config_file is not None:
        try:
            with open(config_file, "rb") as f:
                document = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Cannot load config file {config_file}: {e}") from e

        table = document.get("dsymfinder", {})
        if not isinstance(table, dict):
            raise ConfigurationError(f"{config_file}: [dsymfinder] must be a table")
        settings = _apply_table(settings, table, str(config_file))

    return _apply_environment(settings, os.environ if environ is None else environ)


def configure_logging(level: str | None = None, log_file: Path | None = None) -> None:
    """Configure root logging.

    Logs go to ``log_file`` when given, otherwise to stderr. Nothing is
    configured when neither a level nor a file is requested.
    """
    if level is None and log_file is None:
        return

    level_value = getattr(logging, (level or "INFO").upper(), None)
    if not isinstance(level_value, int):
        raise ConfigurationError(f"Unknown log level: {level!r}")

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        filename=str(log_file) if log_file is not None else None,
        level=level_value,
        format=LOG_FORMAT,
    )
