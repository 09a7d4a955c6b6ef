"""Subscription filter policy and label selector models."""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Iterable, Mapping
from typing import Any


@dataclass(frozen=True)
class SelectorRequirement:
    """A single ``key operator values`` requirement of a label selector."""

    key: str
    operator: str
    values: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SelectorRequirement:
        if not isinstance(data, Mapping):
            raise ValueError("matchExpressions entries must be objects")
        key = data.get("key")
        if not key or not isinstance(key, str):
            raise ValueError("matchExpressions entry is missing 'key'")
        op = data.get("operator")
        if not op or not isinstance(op, str):
            raise ValueError(f"matchExpressions entry for '{key}' is missing 'operator'")
        values = data.get("values") or []
        if not isinstance(values, list):
            raise ValueError(f"matchExpressions entry for '{key}' has non-list 'values'")
        return cls(key=key, operator=op, values=tuple(str(v) for v in values))


@dataclass(frozen=True)
class LabelSelector:
    """Kubernetes-shaped label selector: exact labels plus set-based expressions."""

    match_labels: Mapping[str, str] = field(default_factory=dict)
    match_expressions: tuple[SelectorRequirement, ...] = ()

    def requirements(self) -> list[SelectorRequirement]:
        """Return every requirement, with ``match_labels`` expressed as ``In``."""
        converted = [
            SelectorRequirement(key=key, operator="In", values=(value,))
            for key, value in sorted(self.match_labels.items())
        ]
        return converted + list(self.match_expressions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LabelSelector:
        if not isinstance(data, Mapping):
            raise ValueError("labelSelector must be an object")

        labels = data.get("matchLabels")
        if labels is None:
            labels = {}
        if not isinstance(labels, Mapping):
            raise ValueError("labelSelector.matchLabels must be an object")

        expressions = data.get("matchExpressions")
        if expressions is None:
            expressions = []
        if not isinstance(expressions, list):
            raise ValueError("labelSelector.matchExpressions must be an array")

        return cls(
            match_labels={str(k): str(v) for k, v in labels.items()},
            match_expressions=tuple(SelectorRequirement.from_dict(e) for e in expressions),
        )


@dataclass(frozen=True)
class PackageOverride:
    """Per-package override carried by a subscription."""

    package_name: str
    package_alias: str | None = None


@dataclass(frozen=True)
class SubscriptionFilterPolicy:
    """Filter constraints taken from one subscription.

    Optional filters are ``None`` when not configured. ``package_name`` is
    required by the filter pipeline but may be missing here so the pipeline can
    report it.
    """

    package_name: str | None
    version_range: str | None = None
    secondary_tool_version_range: str | None = None
    keyword_selector: LabelSelector | None = None
    package_overrides: tuple[PackageOverride, ...] = ()
    name: str = ""
    namespace: str = ""

    @property
    def subscription_ref(self) -> str:
        return f"{self.namespace}/{self.name}"

    def overrides_for(self, package_name: str) -> Iterable[PackageOverride]:
        return (o for o in self.package_overrides if o.package_name == package_name)
