"""Assemble a package index from chart directories on disk."""

from __future__ import annotations

from pathlib import Path
from collections.abc import Callable, Iterable
from typing import TypeAlias

import structlog

from .models.chart_version import ChartMetadata
from .models.index import PackageIndex
from .parsers.chart_yaml import ChartLoadError, load_chart_file

logger = structlog.get_logger()

PROVENANCE = "generated-by-multicloud-operators-subscription"

ChartLoader: TypeAlias = Callable[[Path], ChartMetadata]


def _base_dir(chart_dir: Path, repo_root: Path) -> str:
    """Return the chart's parent directory relative to the repository root."""
    try:
        relative = chart_dir.parent.relative_to(repo_root)
    except ValueError as exc:
        raise ChartLoadError(
            f"Chart directory {chart_dir} is outside repository root {repo_root}"
        ) from exc
    base = relative.as_posix()
    return "" if base == "." else base


def build_index(
    chart_dirs: Iterable[Path | str],
    repo_root: Path | str,
    *,
    loader: ChartLoader = load_chart_file,
    provenance: str = PROVENANCE,
) -> PackageIndex:
    """Load every chart directory into a new index.

    Each chart is registered under its directory name with a URL relative to
    ``repo_root`` and ``provenance`` as its digest. Buckets are returned sorted
    newest first.

    Raises:
        ChartLoadError: On the first chart that cannot be loaded.
    """
    root = Path(repo_root)
    index = PackageIndex()

    for chart_dir in sorted(Path(d) for d in chart_dirs):
        folder_name = chart_dir.name
        base_dir = _base_dir(chart_dir, root)

        try:
            metadata = loader(chart_dir)
        except ChartLoadError as exc:
            logger.error("index.chart_load_failed", chart_dir=str(chart_dir), error=str(exc))
            raise

        index.add(metadata, folder_name, base_dir, provenance, name=folder_name)
        logger.debug("index.chart_added", chart=folder_name, version=metadata.version)

    index.sort_entries()
    logger.info("index.built", charts=len(index), versions=index.version_count)
    return index
