"""In-memory package index keyed by chart name."""

from __future__ import annotations

import posixpath
from collections.abc import Mapping, Sequence

from ..parsers.semver import version_sort_key
from .chart_version import ChartMetadata, ChartVersion


class PackageIndex:
    """Mapping of chart name to its known versions.

    ``entries`` is exposed directly so filters can prune buckets in place. After
    ``sort_entries`` each bucket holds its versions newest first.
    """

    def __init__(self, entries: Mapping[str, Sequence[ChartVersion]] | None = None) -> None:
        self.entries: dict[str, list[ChartVersion]] = {
            name: list(versions) for name, versions in (entries or {}).items()
        }

    def __repr__(self) -> str:
        return f"PackageIndex({self.entries!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageIndex):
            return NotImplemented
        return self.entries == other.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    @property
    def version_count(self) -> int:
        return sum(len(versions) for versions in self.entries.values())

    def add(
        self,
        metadata: ChartMetadata,
        filename: str,
        base_url: str,
        digest: str,
        *,
        name: str | None = None,
    ) -> ChartVersion:
        """Register a chart version and return the created record.

        The URL is ``filename`` joined onto ``base_url`` when a base is given.
        The bucket key defaults to the chart's own name.
        """
        url = filename
        if base_url:
            url = posixpath.join(base_url, posixpath.basename(filename))

        chart = ChartVersion.from_metadata(metadata, digest=digest, urls=[url])
        self.entries.setdefault(name or metadata.name, []).append(chart)
        return chart

    def sort_entries(self) -> None:
        """Sort every bucket into descending version order.

        Versions that are not valid semver go last.
        """
        for versions in self.entries.values():
            versions.sort(key=lambda chart: version_sort_key(chart.version), reverse=True)

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            name: [chart.to_dict() for chart in self.entries[name]]
            for name in sorted(self.entries)
        }
