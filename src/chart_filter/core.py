"""Core entrypoints: build a chart index from a checkout and filter it.

This module MUST NOT depend on how the subscription or the checkout were
obtained so it can be used both from the CLI and from a controller.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path
from collections.abc import Iterable

import structlog

from .discovery import discover_chart_dirs
from .filtering import filter_charts
from .index_builder import build_index
from .models.index import PackageIndex
from .models.policy import SubscriptionFilterPolicy
from .parsers.chart_yaml import load_chart_file
from .settings import Settings

logger = structlog.get_logger()


def generate_index(
    policy: SubscriptionFilterPolicy,
    repo_root: Path | str,
    chart_dirs: Iterable[Path | str] | None = None,
    settings: Settings | None = None,
) -> PackageIndex:
    """Build the index for ``repo_root`` and filter it with ``policy``.

    Params:
        policy: filter constraints of one subscription
        repo_root: root of the checkout; chart URLs are relative to it
        chart_dirs: chart directories to index; discovered under repo_root
            when None
        settings: manifest name, provenance marker and exclusions

    Returns: the filtered index, possibly with no entries

    Raises ChartLoadError when a chart cannot be loaded and
    MissingRequiredFieldError when the policy names no package.
    """
    settings = settings or Settings()
    root = Path(repo_root).resolve()

    if chart_dirs is None:
        chart_dirs = discover_chart_dirs(
            root,
            manifest_filename=settings.manifest_filename,
            excludes=settings.exclude_dirs,
        )
    else:
        chart_dirs = [Path(d).resolve() for d in chart_dirs]

    loader = partial(load_chart_file, manifest_filename=settings.manifest_filename)
    index = build_index(chart_dirs, root, loader=loader, provenance=settings.provenance)
    return filter_charts(index, policy)


def get_package_alias(policy: SubscriptionFilterPolicy, package_name: str) -> str | None:
    """Return the alias configured for ``package_name``, if any."""
    for override in policy.overrides_for(package_name):
        logger.info("overrides.found", package=package_name)
        if override.package_alias:
            return override.package_alias
    return None
