"""Chart metadata, version candidate and cached artifact models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ChartMetadata:
    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    api_version: str = ""
    home: str = ""
    sources: list[str] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> ChartMetadata:
        if not d:
            return cls()
        return cls(
            name=d.get("name", ""),
            version=d.get("version", ""),
            app_version=d.get("appVersion", ""),
            description=d.get("description", ""),
            api_version=d.get("apiVersion", ""),
            home=d.get("home", ""),
            sources=d.get("sources", []) or [],
            annotations=d.get("annotations", {}) or {},
        )


@dataclass
class ChartVersionCandidate:
    version: str
    app_version: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "version": self.version,
            "appVersion": self.app_version,
            "description": self.description,
        }


@dataclass(frozen=True)
class CachedChartArtifact:
    path: Path
    chart_name: str
    version: str


def cache_file_name(chart_name: str, version: str) -> str:
    """Deterministic cache file name for a (chart, version) pair."""
    base = chart_name.rstrip("/").rsplit("/", 1)[-1]
    return f"{base}-{version}.tgz"
