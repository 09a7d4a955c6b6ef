"""Chart metadata and indexed chart version models."""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterable


@dataclass(frozen=True)
class ChartMetadata:
    """Metadata read from a chart manifest (Chart.yaml)."""

    name: str
    version: str
    secondary_tool_version: str | None = None
    keywords: tuple[str, ...] = ()
    description: str = ""
    app_version: str | None = None
    api_version: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Chart name must be non-empty")
        if not self.version:
            raise ValueError("Chart version must be non-empty")
        if any(not isinstance(keyword, str) for keyword in self.keywords):
            raise ValueError("Keywords must be strings")


@dataclass(frozen=True)
class ChartVersion:
    """Represent one version of a chart registered in a package index."""

    name: str
    version: str
    secondary_tool_version: str | None = None
    keywords: frozenset[str] = frozenset()
    digest: str = ""
    urls: tuple[str, ...] = ()
    description: str = ""
    app_version: str | None = None
    api_version: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Chart name must be non-empty")
        if not isinstance(self.keywords, frozenset):
            raise ValueError("Keywords must be a frozenset")

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "name": self.name,
            "version": self.version,
            "keywords": sorted(self.keywords),
            "digest": self.digest,
            "urls": list(self.urls),
        }
        if self.secondary_tool_version:
            data["tillerVersion"] = self.secondary_tool_version
        if self.description:
            data["description"] = self.description
        if self.app_version:
            data["appVersion"] = self.app_version
        if self.api_version:
            data["apiVersion"] = self.api_version
        return data

    @classmethod
    def from_metadata(
        cls, metadata: ChartMetadata, *, digest: str, urls: Iterable[str]
    ) -> ChartVersion:
        return cls(
            name=metadata.name,
            version=metadata.version,
            secondary_tool_version=metadata.secondary_tool_version,
            keywords=frozenset(metadata.keywords),
            digest=digest,
            urls=tuple(urls),
            description=metadata.description,
            app_version=metadata.app_version,
            api_version=metadata.api_version,
        )
