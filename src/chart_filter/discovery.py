"""Chart directory discovery utilities."""

from __future__ import annotations

from pathlib import Path
from collections.abc import Iterable

from .parsers.chart_yaml import MANIFEST_FILENAME

EXCLUDES = {".git", ".github", "node_modules", ".venv"}


def discover_chart_dirs(
    root: Path,
    manifest_filename: str = MANIFEST_FILENAME,
    excludes: Iterable[str] = EXCLUDES,
) -> list[Path]:
    """Find chart directories recursively under root.

    A chart directory contains ``manifest_filename``. Charts nested inside
    another chart (its ``charts/`` dependencies) are not reported separately.
    """
    root = root.resolve()
    excluded = set(excludes)
    found: list[Path] = []

    def should_skip(p: Path) -> bool:
        return any(part in excluded for part in p.parts)

    # Shallowest first so parent charts are recorded before their dependencies.
    manifests = sorted(root.rglob(manifest_filename), key=lambda p: (len(p.parts), p))
    for manifest in manifests:
        if not manifest.is_file():
            continue
        chart_dir = manifest.parent
        if should_skip(chart_dir.relative_to(root)):
            continue
        if any(chart_dir.is_relative_to(parent) for parent in found):
            continue
        found.append(chart_dir)

    return sorted(found)
