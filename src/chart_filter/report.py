"""Report rendering for a filtered index."""

from __future__ import annotations

from typing import Any

from .models.index import PackageIndex
from .models.policy import SubscriptionFilterPolicy


def index_report(index: PackageIndex, policy: SubscriptionFilterPolicy | None = None) -> dict[str, Any]:
    """Render ``index`` as a JSON-friendly mapping.

    ``entries`` maps each chart to its versions, newest first. ``totals``
    counts charts and versions, and ``hasMatches`` is False for an empty
    result.
    """
    report: dict[str, Any] = {
        "version": "1",
        "hasMatches": len(index) > 0,
        "entries": index.to_dict(),
        "totals": {
            "charts": len(index),
            "versions": index.version_count,
        },
    }

    if policy is not None:
        report["subscription"] = {
            "name": policy.name,
            "namespace": policy.namespace,
            "package": policy.package_name,
        }

    return report
