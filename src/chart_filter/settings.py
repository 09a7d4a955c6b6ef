"""Configuration loader for chart indexing and filtering.

Reads settings from a JSON file and validates the structure. Every key is
optional; missing keys fall back to the defaults below::

    {
      "manifestFilename": "Chart.yaml",
      "provenance": "generated-by-multicloud-operators-subscription",
      "secondaryVersionAnnotation": "tillerVersion",
      "excludeDirs": [".git", ".github", "node_modules", ".venv"]
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .discovery import EXCLUDES
from .index_builder import PROVENANCE
from .parsers.chart_yaml import MANIFEST_FILENAME
from .parsers.subscription import SECONDARY_VERSION_ANNOTATION

CONFIG_PATH_ENV_VAR = "CHART_FILTER_CONFIG"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""


def _string_field(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"Invalid '{key}' field (must be non-empty string)")
    return value


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    manifest_filename: str = MANIFEST_FILENAME
    provenance: str = PROVENANCE
    secondary_version_annotation: str = SECONDARY_VERSION_ANNOTATION
    exclude_dirs: tuple[str, ...] = tuple(sorted(EXCLUDES))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from a dictionary, validating each field."""
        manifest_filename = _string_field(data, "manifestFilename", MANIFEST_FILENAME)
        if "/" in manifest_filename:
            raise ConfigError("Invalid 'manifestFilename' field (must be a bare file name)")

        exclude_dirs = data.get("excludeDirs", sorted(EXCLUDES))
        if not isinstance(exclude_dirs, list) or any(
            not isinstance(d, str) or not d for d in exclude_dirs
        ):
            raise ConfigError("Invalid 'excludeDirs' field (must be array of non-empty strings)")

        return cls(
            manifest_filename=manifest_filename,
            provenance=_string_field(data, "provenance", PROVENANCE),
            secondary_version_annotation=_string_field(
                data, "secondaryVersionAnnotation", SECONDARY_VERSION_ANNOTATION
            ),
            exclude_dirs=tuple(exclude_dirs),
        )


def _resolve_config_path(path: Path | str | None = None) -> Path | None:
    """Resolve the configuration file path.

    Priority:
    1. Explicit path argument
    2. CHART_FILTER_CONFIG environment variable
    3. None (built-in defaults)
    """
    if path is not None:
        return Path(path)

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    return None


def load_settings(path: Path | str | None = None) -> Settings:
    """Load and validate settings from a JSON file.

    Args:
        path: Optional path to the config file. If not provided, uses the
            CHART_FILTER_CONFIG env var or falls back to built-in defaults.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    config_path = _resolve_config_path(path)
    if config_path is None:
        return Settings()

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    return Settings.from_dict(data)
