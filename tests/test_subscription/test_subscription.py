"""
Tests for reading subscriptions into filter policies.

Covers:
- policy_from_subscription: field mapping, empty strings, label selectors
- load_subscription: multi-document YAML files
- get_package_alias: package overrides
- subscription_schema: JSON Schema validation and its CLI
"""

from pathlib import Path

import pytest

from chart_filter.core import get_package_alias
from chart_filter.models.policy import LabelSelector, PackageOverride, SelectorRequirement
from chart_filter.parsers.subscription import (
    SubscriptionError,
    load_subscription,
    policy_from_subscription,
)
from chart_filter.validators.subscription_schema import (
    SchemaValidationError,
    main as validate_main,
    validate_document,
)

SUBSCRIPTION = {
    "apiVersion": "apps.open-cluster-management.io/v1",
    "kind": "Subscription",
    "metadata": {"name": "nginx-sub", "namespace": "default"},
    "spec": {
        "package": "nginx-ingress",
        "packageFilter": {
            "version": ">=1.2.3 <2.0.0",
            "annotations": {"tillerVersion": ">=2.4.0"},
            "labelSelector": {
                "matchLabels": {"stable": "stable"},
                "matchExpressions": [
                    {"key": "env", "operator": "In", "values": ["env", "prod"]}
                ],
            },
        },
        "packageOverrides": [
            {"packageName": "nginx-ingress", "packageAlias": "ingress"},
        ],
    },
}

SUBSCRIPTION_YAML = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: unrelated
---
apiVersion: apps.open-cluster-management.io/v1
kind: Subscription
metadata:
  name: app-sub
  namespace: apps
spec:
  package: app
  packageFilter:
    version: ">=1.5.0"
"""


class TestPolicyFromSubscription:
    def test_maps_all_fields(self):
        policy = policy_from_subscription(SUBSCRIPTION)
        assert policy.package_name == "nginx-ingress"
        assert policy.version_range == ">=1.2.3 <2.0.0"
        assert policy.secondary_tool_version_range == ">=2.4.0"
        assert policy.keyword_selector == LabelSelector(
            match_labels={"stable": "stable"},
            match_expressions=(SelectorRequirement("env", "In", ("env", "prod")),),
        )
        assert policy.package_overrides == (PackageOverride("nginx-ingress", "ingress"),)
        assert policy.subscription_ref == "default/nginx-sub"

    def test_empty_strings_are_not_configured(self):
        policy = policy_from_subscription(
            {"spec": {"package": "app", "packageFilter": {"version": "", "annotations": {}}}}
        )
        assert policy.version_range is None
        assert policy.secondary_tool_version_range is None
        assert policy.keyword_selector is None

    def test_missing_package_is_none(self):
        assert policy_from_subscription({"spec": {}}).package_name is None

    def test_custom_annotation_key(self):
        doc = {"spec": {"package": "app", "packageFilter": {"annotations": {"kubeVersion": "1.x"}}}}
        policy = policy_from_subscription(doc, annotation_key="kubeVersion")
        assert policy.secondary_tool_version_range == "1.x"

    def test_invalid_label_selector(self):
        doc = {"spec": {"package": "app", "packageFilter": {"labelSelector": {"matchExpressions": {}}}}}
        with pytest.raises(SubscriptionError, match="matchExpressions"):
            policy_from_subscription(doc)

    def test_invalid_spec(self):
        with pytest.raises(SubscriptionError, match="spec"):
            policy_from_subscription({"spec": ["not", "a", "mapping"]})


class TestLoadSubscription:
    def test_picks_subscription_document(self, tmp_path: Path):
        path = tmp_path / "sub.yaml"
        path.write_text(SUBSCRIPTION_YAML, encoding="utf-8")
        policy = load_subscription(path)
        assert policy.package_name == "app"
        assert policy.version_range == ">=1.5.0"
        assert policy.subscription_ref == "apps/app-sub"

    def test_no_subscription_document(self, tmp_path: Path):
        path = tmp_path / "sub.yaml"
        path.write_text("kind: ConfigMap\n", encoding="utf-8")
        with pytest.raises(SubscriptionError, match="No Subscription"):
            load_subscription(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(SubscriptionError, match="Failed to read"):
            load_subscription(tmp_path / "missing.yaml")


class TestPackageAlias:
    def test_alias_found(self):
        policy = policy_from_subscription(SUBSCRIPTION)
        assert get_package_alias(policy, "nginx-ingress") == "ingress"

    def test_no_override(self):
        policy = policy_from_subscription(SUBSCRIPTION)
        assert get_package_alias(policy, "other") is None

    def test_override_without_alias(self):
        policy = policy_from_subscription(
            {"spec": {"package": "app", "packageOverrides": [{"packageName": "app"}]}}
        )
        assert get_package_alias(policy, "app") is None


class TestSchemaValidation:
    def test_valid_document(self):
        validate_document(SUBSCRIPTION)

    def test_missing_package(self):
        with pytest.raises(SchemaValidationError, match="package"):
            validate_document({"spec": {}})

    def test_unknown_operator(self):
        doc = {
            "spec": {
                "package": "app",
                "packageFilter": {
                    "labelSelector": {"matchExpressions": [{"key": "a", "operator": "Has"}]}
                },
            }
        }
        with pytest.raises(SchemaValidationError, match="operator"):
            validate_document(doc)

    def test_cli(self, tmp_path: Path, capsys):
        good = tmp_path / "good.yaml"
        good.write_text(SUBSCRIPTION_YAML.split("---\n", 1)[1], encoding="utf-8")
        bad = tmp_path / "bad.yaml"
        bad.write_text("kind: Subscription\nspec: {}\n", encoding="utf-8")

        assert validate_main(["--input", str(good)]) == 0
        assert "is valid" in capsys.readouterr().out
        assert validate_main(["--input", str(bad)]) == 1
        assert "failed validation" in capsys.readouterr().err
        assert validate_main(["--input", str(tmp_path / "missing.yaml")]) == 1
