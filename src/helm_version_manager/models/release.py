"""Helm release models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from helm_version_manager.models.chart import ChartMetadata


class ReleaseStatus(enum.Enum):
    DEPLOYED = "deployed"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    PENDING_INSTALL = "pending-install"
    PENDING_UPGRADE = "pending-upgrade"
    PENDING_ROLLBACK = "pending-rollback"
    UNINSTALLING = "uninstalling"
    UNINSTALLED = "uninstalled"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, s: str) -> ReleaseStatus:
        for member in cls:
            if member.value == s:
                return member
        return cls.UNKNOWN


@dataclass
class ReleaseInfo:
    first_deployed: str = ""
    last_deployed: str = ""
    status: ReleaseStatus = ReleaseStatus.UNKNOWN
    description: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ReleaseInfo:
        if not d:
            return cls()
        return cls(
            first_deployed=d.get("first_deployed", ""),
            last_deployed=d.get("last_deployed", ""),
            status=ReleaseStatus.from_str(d.get("status", "unknown")),
            description=d.get("description", ""),
        )


def short_timestamp(raw: str) -> str:
    if not raw:
        return ""
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        return dt.strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return raw[:19]


@dataclass
class HelmRelease:
    name: str = ""
    namespace: str = ""
    version: int = 0
    info: ReleaseInfo = field(default_factory=ReleaseInfo)
    chart: ChartMetadata = field(default_factory=ChartMetadata)
    config: dict[str, Any] = field(default_factory=dict)
    has_registry: bool = False

    @property
    def chart_name(self) -> str:
        return self.chart.name

    @property
    def chart_version(self) -> str:
        return self.chart.version

    @property
    def app_version(self) -> str:
        return self.chart.app_version

    @property
    def updated(self) -> str:
        return self.info.last_deployed

    @property
    def status(self) -> ReleaseStatus:
        return self.info.status

    @property
    def updated_short(self) -> str:
        return short_timestamp(self.info.last_deployed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "chart": self.chart_name,
            "chartVersion": self.chart_version,
            "appVersion": self.app_version,
            "status": self.status.value,
            "updated": self.updated,
            "revision": self.version,
            "hasRegistry": self.has_registry,
        }

    @classmethod
    def from_dict(cls, d: dict) -> HelmRelease:
        chart_raw = d.get("chart", {}) or {}
        return cls(
            name=d.get("name", ""),
            namespace=d.get("namespace", ""),
            version=d.get("version", 0),
            info=ReleaseInfo.from_dict(d.get("info", {})),
            chart=ChartMetadata.from_dict(chart_raw.get("metadata", {})),
            config=d.get("config", {}) or {},
        )


@dataclass
class RevisionRecord:
    revision: int
    updated: str
    status: ReleaseStatus
    chart_version: str
    app_version: str
    description: str = ""

    @property
    def updated_short(self) -> str:
        return short_timestamp(self.updated)

    @classmethod
    def from_release(cls, r: HelmRelease) -> RevisionRecord:
        return cls(
            revision=r.version,
            updated=r.updated,
            status=r.status,
            chart_version=r.chart_version,
            app_version=r.app_version,
            description=r.info.description,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "revision": self.revision,
            "updated": self.updated,
            "status": self.status.value,
            "chart": self.chart_version,
            "appVersion": self.app_version,
            "description": self.description,
        }
