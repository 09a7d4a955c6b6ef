"""Narrow a package index down to the charts a subscription asks for.

Filters run in a fixed order: name, then per-version checks (keywords,
secondary tool version, version range), then removal of empty buckets. Bucket
keys are snapshotted before any deletion.
"""

from __future__ import annotations

import structlog

from . import keywords
from .models.chart_version import ChartVersion
from .models.index import PackageIndex
from .models.policy import SubscriptionFilterPolicy
from .parsers import semver
from .parsers.semver import SemverParseError

logger = structlog.get_logger()


class MissingRequiredFieldError(ValueError):
    """Raised when the policy does not name a package."""


def remove_non_matching_name(index: PackageIndex, policy: SubscriptionFilterPolicy) -> None:
    """Delete every bucket whose key is not the policy's package name.

    Raises:
        MissingRequiredFieldError: If no package name is set. The index is left
            untouched in that case.
    """
    if not policy.package_name:
        logger.error("filter.missing_package_name", subscription=policy.subscription_ref)
        raise MissingRequiredFieldError(
            f"subscription.spec.package is missing for subscription: {policy.subscription_ref}"
        )

    for key in list(index.entries):
        if key != policy.package_name:
            del index.entries[key]

    logger.debug("filter.after_name_match", charts=sorted(index.entries))


def check_keywords(policy: SubscriptionFilterPolicy, chart: ChartVersion) -> bool:
    return keywords.matches(policy.keyword_selector, chart.keywords)


def check_secondary_tool_version(policy: SubscriptionFilterPolicy, chart: ChartVersion) -> bool:
    """Charts without a secondary tool version fail when a range is configured."""
    expected = policy.secondary_tool_version_range
    if expected is None:
        return True
    if not chart.secondary_tool_version:
        return False

    try:
        return semver.matches(expected, chart.secondary_tool_version)
    except SemverParseError as exc:
        logger.debug(
            "filter.secondary_version_parse_error",
            chart=chart.name,
            version=chart.secondary_tool_version,
            error=str(exc),
        )
        return False


def check_version(policy: SubscriptionFilterPolicy, chart: ChartVersion) -> bool:
    if policy.version_range is None:
        return True

    try:
        return semver.matches(policy.version_range, chart.version)
    except SemverParseError as exc:
        logger.debug(
            "filter.version_parse_error",
            chart=chart.name,
            version=chart.version,
            error=str(exc),
        )
        return False


def _keep(policy: SubscriptionFilterPolicy, chart: ChartVersion) -> bool:
    return (
        check_keywords(policy, chart)
        and check_secondary_tool_version(policy, chart)
        and check_version(policy, chart)
    )


def filter_on_version(index: PackageIndex, policy: SubscriptionFilterPolicy) -> None:
    """Drop versions failing any check, then drop buckets left empty."""
    for key in sorted(index.entries):
        kept = [chart for chart in index.entries[key] if _keep(policy, chart)]
        if kept:
            index.entries[key] = kept
        else:
            del index.entries[key]

    logger.debug("filter.after_version_match", charts=sorted(index.entries))


def filter_charts(index: PackageIndex, policy: SubscriptionFilterPolicy) -> PackageIndex:
    """Filter ``index`` in place and return it.

    An index with no remaining buckets is a valid result.
    """
    remove_non_matching_name(index, policy)
    filter_on_version(index, policy)
    return index
