"""Parse Chart.yaml manifests into chart metadata."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..models.chart_version import ChartMetadata

MANIFEST_FILENAME = "Chart.yaml"


class ChartLoadError(RuntimeError):
    """Raised when a chart manifest cannot be read or is invalid."""


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    return str(value)


def parse(path: Path) -> ChartMetadata:
    """Return the metadata declared in a Chart.yaml file.

    ``tillerVersion`` is read as the chart's secondary tool version.
    """
    import yaml

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ChartLoadError(f"Failed to read chart manifest {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ChartLoadError(f"Invalid YAML in chart manifest {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ChartLoadError(f"Chart manifest {path} must be a mapping")

    name = _optional_str(data, "name")
    if name is None:
        raise ChartLoadError(f"Chart manifest {path} is missing required 'name' field")

    version = _optional_str(data, "version")
    if version is None:
        raise ChartLoadError(f"Chart manifest {path} is missing required 'version' field")

    keywords = data.get("keywords") or []
    if not isinstance(keywords, list):
        raise ChartLoadError(f"Chart manifest {path} has invalid 'keywords' field (must be list)")

    return ChartMetadata(
        name=name,
        version=version,
        secondary_tool_version=_optional_str(data, "tillerVersion"),
        keywords=tuple(str(k) for k in keywords if k is not None),
        description=str(data.get("description") or ""),
        app_version=_optional_str(data, "appVersion"),
        api_version=_optional_str(data, "apiVersion"),
    )


def load_chart_file(chart_dir: Path | str, manifest_filename: str = MANIFEST_FILENAME) -> ChartMetadata:
    """Load the manifest that lives in ``chart_dir``."""
    return parse(Path(chart_dir) / manifest_filename)
