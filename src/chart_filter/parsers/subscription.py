"""Read subscription resources into filter policies.

A subscription is a Kubernetes-style document::

    apiVersion: apps.open-cluster-management.io/v1
    kind: Subscription
    metadata: {name: nginx-sub, namespace: default}
    spec:
      package: nginx-ingress
      packageFilter:
        version: ">=1.2.3 <2.0.0"
        annotations: {tillerVersion: ">=2.4.0"}
        labelSelector:
          matchLabels: {stable: stable}
      packageOverrides:
        - packageName: nginx-ingress
          packageAlias: ingress
"""

from __future__ import annotations

from pathlib import Path
from collections.abc import Mapping
from typing import Any

from ..models.policy import LabelSelector, PackageOverride, SubscriptionFilterPolicy

SUBSCRIPTION_KIND = "Subscription"
SECONDARY_VERSION_ANNOTATION = "tillerVersion"


class SubscriptionError(ValueError):
    """Raised when a subscription document is malformed."""


def _mapping(data: Any, where: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise SubscriptionError(f"{where} must be an object")
    return data


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _parse_overrides(data: Any) -> tuple[PackageOverride, ...]:
    if data is None:
        return ()
    if not isinstance(data, list):
        raise SubscriptionError("spec.packageOverrides must be an array")

    overrides: list[PackageOverride] = []
    for index, entry in enumerate(data):
        entry = _mapping(entry, f"spec.packageOverrides[{index}]")
        package_name = _optional_str(entry.get("packageName"))
        if package_name is None:
            raise SubscriptionError(f"spec.packageOverrides[{index}] is missing 'packageName'")
        overrides.append(
            PackageOverride(
                package_name=package_name,
                package_alias=_optional_str(entry.get("packageAlias")),
            )
        )
    return tuple(overrides)


def policy_from_subscription(
    document: Mapping[str, Any],
    annotation_key: str = SECONDARY_VERSION_ANNOTATION,
) -> SubscriptionFilterPolicy:
    """Build a filter policy from a subscription mapping.

    Empty strings are read as "not configured".
    """
    document = _mapping(document, "subscription")
    metadata = _mapping(document.get("metadata"), "metadata")
    spec = _mapping(document.get("spec"), "spec")
    package_filter = _mapping(spec.get("packageFilter"), "spec.packageFilter")
    annotations = _mapping(package_filter.get("annotations"), "spec.packageFilter.annotations")

    selector = None
    raw_selector = package_filter.get("labelSelector")
    if raw_selector is not None:
        try:
            selector = LabelSelector.from_dict(raw_selector)
        except ValueError as exc:
            raise SubscriptionError(f"spec.packageFilter.{exc}") from exc

    return SubscriptionFilterPolicy(
        package_name=_optional_str(spec.get("package")),
        version_range=_optional_str(package_filter.get("version")),
        secondary_tool_version_range=_optional_str(annotations.get(annotation_key)),
        keyword_selector=selector,
        package_overrides=_parse_overrides(spec.get("packageOverrides")),
        name=str(metadata.get("name") or ""),
        namespace=str(metadata.get("namespace") or ""),
    )


def load_subscription(
    path: Path | str,
    annotation_key: str = SECONDARY_VERSION_ANNOTATION,
) -> SubscriptionFilterPolicy:
    """Read the first Subscription document from a YAML (or JSON) file."""
    import yaml

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SubscriptionError(f"Failed to read subscription {path}: {exc}") from exc

    try:
        documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as exc:
        raise SubscriptionError(f"Invalid YAML in subscription {path}: {exc}") from exc

    for doc in documents:
        if isinstance(doc, Mapping) and doc.get("kind") in (None, SUBSCRIPTION_KIND):
            return policy_from_subscription(doc, annotation_key=annotation_key)

    raise SubscriptionError(f"No {SUBSCRIPTION_KIND} document found in {path}")
