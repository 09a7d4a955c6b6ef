"""Data models for chart indexing and subscription filtering."""

from __future__ import annotations

from .chart_version import ChartMetadata, ChartVersion
from .index import PackageIndex
from .policy import LabelSelector, PackageOverride, SelectorRequirement, SubscriptionFilterPolicy

__all__ = [
    "ChartMetadata",
    "ChartVersion",
    "LabelSelector",
    "PackageIndex",
    "PackageOverride",
    "SelectorRequirement",
    "SubscriptionFilterPolicy",
]
