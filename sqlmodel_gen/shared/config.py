"""Generator options and YAML configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError
from .naming import split_list

# Keys accepted in a configuration file
CONFIG_KEYS: frozenset[str] = frozenset({
    "output",
    "dsn",
    "tables",
    "tag",
    "force_cases",
    "binary_as_bytes",
})


@dataclass(frozen=True, slots=True)
class Options:
    """Validated options for a single generation run."""

    data_source: str
    table_names: tuple[str, ...] = ()
    tag: str | None = None
    force_cases: tuple[str, ...] = field(default=())
    binary_as_bytes: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.data_source, str) or not self.data_source.strip():
            raise ConfigError("a database connection string is required")
        # Normalize list-like inputs so callers may pass lists or comma strings
        object.__setattr__(self, "table_names", split_list(self.table_names))
        object.__setattr__(self, "force_cases", split_list(self.force_cases))
        tag = self.tag.strip() if isinstance(self.tag, str) else self.tag
        object.__setattr__(self, "tag", tag or None)


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a generator configuration from a YAML file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        The parsed configuration mapping.

    Raises:
        ConfigError: If the file cannot be read, parsed or has unknown keys.
    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}", str(config_path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", str(config_path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping", str(config_path))

    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}", str(config_path))

    return data


def merge_settings(
    file_settings: Mapping[str, Any],
    overrides: Mapping[str, Any],
) -> dict[str, Any]:
    """Overlay command-line values on file settings, ignoring unset flags."""
    merged = dict(file_settings)
    for key, value in overrides.items():
        if value is not None and value is not False:
            merged[key] = value
    return merged


def options_from_settings(settings: Mapping[str, Any]) -> Options:
    """Build ``Options`` from a merged settings mapping."""
    return Options(
        data_source=settings.get("dsn") or "",
        table_names=settings.get("tables") or (),
        tag=settings.get("tag"),
        force_cases=settings.get("force_cases") or (),
        binary_as_bytes=bool(settings.get("binary_as_bytes", False)),
    )
