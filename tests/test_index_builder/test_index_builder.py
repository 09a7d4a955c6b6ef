"""
Tests for building a package index from chart directories.

Covers:
- chart_yaml.parse: required fields, tillerVersion, keywords, errors
- discover_chart_dirs: nested charts and excluded directories
- build_index: bucket naming, URLs, provenance, ordering, fatal load errors
"""

from pathlib import Path

import pytest

from chart_filter.discovery import discover_chart_dirs
from chart_filter.index_builder import PROVENANCE, build_index
from chart_filter.models.chart_version import ChartMetadata
from chart_filter.models.index import PackageIndex
from chart_filter.parsers.chart_yaml import ChartLoadError, load_chart_file, parse


def _write_chart(chart_dir: Path, name: str, version: str, extra: str = "") -> Path:
    chart_dir.mkdir(parents=True, exist_ok=True)
    (chart_dir / "Chart.yaml").write_text(
        f"apiVersion: v1\nname: {name}\nversion: {version}\n{extra}", encoding="utf-8"
    )
    return chart_dir


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    return tmp_path


# ── Tests: Chart.yaml parsing ─────────────────────────────────────────


class TestParseChartYaml:
    def test_full_manifest(self, repo: Path):
        chart_dir = _write_chart(
            repo / "app",
            "app",
            "1.2.3",
            'tillerVersion: ">=2.4.0"\nkeywords:\n  - stable\n  - db\n'
            "description: An app\nappVersion: 4.5.6\n",
        )
        metadata = load_chart_file(chart_dir)
        assert metadata.name == "app"
        assert metadata.version == "1.2.3"
        assert metadata.secondary_tool_version == ">=2.4.0"
        assert metadata.keywords == ("stable", "db")
        assert metadata.description == "An app"
        assert metadata.app_version == "4.5.6"
        assert metadata.api_version == "v1"

    def test_optional_fields_absent(self, repo: Path):
        metadata = load_chart_file(_write_chart(repo / "app", "app", "1.0.0"))
        assert metadata.secondary_tool_version is None
        assert metadata.keywords == ()

    def test_missing_file(self, repo: Path):
        with pytest.raises(ChartLoadError, match="Failed to read"):
            load_chart_file(repo / "nothing")

    def test_invalid_yaml(self, repo: Path):
        path = repo / "Chart.yaml"
        path.write_text("name: [unclosed\n", encoding="utf-8")
        with pytest.raises(ChartLoadError, match="Invalid YAML"):
            parse(path)

    def test_not_a_mapping(self, repo: Path):
        path = repo / "Chart.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ChartLoadError, match="mapping"):
            parse(path)

    def test_missing_version(self, repo: Path):
        path = repo / "Chart.yaml"
        path.write_text("name: app\n", encoding="utf-8")
        with pytest.raises(ChartLoadError, match="'version'"):
            parse(path)


# ── Tests: discovery ──────────────────────────────────────────────────


class TestDiscovery:
    def test_finds_charts_and_skips_nested(self, repo: Path):
        _write_chart(repo / "charts" / "app", "app", "1.0.0")
        _write_chart(repo / "charts" / "app" / "charts" / "dep", "dep", "0.1.0")
        _write_chart(repo / "db", "db", "2.0.0")
        _write_chart(repo / ".git" / "hidden", "hidden", "1.0.0")

        found = discover_chart_dirs(repo)
        assert found == [(repo / "charts" / "app").resolve(), (repo / "db").resolve()]

    def test_empty_repository(self, repo: Path):
        assert discover_chart_dirs(repo) == []


# ── Tests: build_index ────────────────────────────────────────────────


class TestBuildIndex:
    def test_bucket_urls_and_provenance(self, repo: Path):
        chart_dir = _write_chart(repo / "stable" / "app", "app", "1.0.0")
        index = build_index([chart_dir], repo)

        assert list(index.entries) == ["app"]
        (chart,) = index.entries["app"]
        assert chart.urls == ("stable/app",)
        assert chart.digest == PROVENANCE

    def test_chart_at_root_has_bare_url(self, repo: Path):
        index = build_index([_write_chart(repo / "app", "app", "1.0.0")], repo)
        assert index.entries["app"][0].urls == ("app",)

    def test_versions_sorted_newest_first(self, repo: Path):
        dirs = [
            _write_chart(repo / "a" / "app", "app", "1.0.0"),
            _write_chart(repo / "b" / "app", "app", "1.10.0"),
            _write_chart(repo / "c" / "app", "app", "1.9.0"),
        ]
        index = build_index(dirs, repo)
        assert [c.version for c in index.entries["app"]] == ["1.10.0", "1.9.0", "1.0.0"]

    def test_registered_under_directory_name(self, repo: Path):
        index = build_index([_write_chart(repo / "nginx", "nginx-ingress", "1.0.0")], repo)
        assert list(index.entries) == ["nginx"]
        assert index.entries["nginx"][0].name == "nginx-ingress"

    def test_load_failure_aborts(self, repo: Path):
        good = _write_chart(repo / "app", "app", "1.0.0")
        bad = repo / "broken"
        bad.mkdir()
        with pytest.raises(ChartLoadError):
            build_index([good, bad], repo)

    def test_outside_root_fails(self, repo: Path, tmp_path_factory):
        other = _write_chart(tmp_path_factory.mktemp("other") / "app", "app", "1.0.0")
        with pytest.raises(ChartLoadError, match="outside repository root"):
            build_index([other], repo / "sub")

    def test_custom_loader_and_provenance(self, repo: Path):
        def loader(chart_dir: Path) -> ChartMetadata:
            return ChartMetadata(name=chart_dir.name, version="9.9.9", keywords=("stable",))

        index = build_index([repo / "x" / "app"], repo, loader=loader, provenance="marker")
        chart = index.entries["app"][0]
        assert chart.version == "9.9.9"
        assert chart.keywords == frozenset({"stable"})
        assert chart.digest == "marker"
        assert chart.urls == ("x/app",)

    def test_does_not_mutate_input(self, repo: Path):
        dirs = [_write_chart(repo / "b", "b", "1.0.0"), _write_chart(repo / "a", "a", "1.0.0")]
        snapshot = list(dirs)
        build_index(dirs, repo)
        assert dirs == snapshot


class TestPackageIndex:
    def test_invalid_versions_sort_last(self):
        index = PackageIndex()
        for version in ["1.0.0", "latest", "2", "10.0.0", "3.0.0"]:
            index.add(ChartMetadata(name="app", version=version), "app", "", PROVENANCE)
        index.sort_entries()
        assert [c.version for c in index.entries["app"]] == [
            "10.0.0",
            "3.0.0",
            "1.0.0",
            "latest",
            "2",
        ]

    def test_prereleases_sorted_by_precedence(self):
        index = PackageIndex()
        for version in ["1.0.0-1", "1.0.0", "1.0.0-alpha.beta", "1.0.0-alpha", "1.0.0-rc.1"]:
            index.add(ChartMetadata(name="app", version=version), "app", "", PROVENANCE)
        index.sort_entries()
        assert [c.version for c in index.entries["app"]] == [
            "1.0.0",
            "1.0.0-rc.1",
            "1.0.0-alpha.beta",
            "1.0.0-alpha",
            "1.0.0-1",
        ]

    def test_to_dict(self):
        index = PackageIndex()
        index.add(
            ChartMetadata(name="app", version="1.0.0", secondary_tool_version="2.5.0"),
            "app",
            "charts",
            PROVENANCE,
        )
        assert index.to_dict() == {
            "app": [
                {
                    "name": "app",
                    "version": "1.0.0",
                    "keywords": [],
                    "digest": PROVENANCE,
                    "urls": ["charts/app"],
                    "tillerVersion": "2.5.0",
                }
            ]
        }
        assert index.version_count == 1
