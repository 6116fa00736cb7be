"""Registry mapping model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RegistryMapping:
    namespace: str
    release_name: str
    chart_name: str
    registry: str

    @property
    def key(self) -> str:
        return mapping_key(self.namespace, self.release_name)

    def to_dict(self) -> dict[str, str]:
        return {
            "namespace": self.namespace,
            "releaseName": self.release_name,
            "chartName": self.chart_name,
            "registry": self.registry,
        }

    @classmethod
    def from_dict(cls, d: dict) -> RegistryMapping:
        return cls(
            namespace=d.get("namespace", ""),
            release_name=d.get("releaseName", ""),
            chart_name=d.get("chartName", ""),
            registry=d.get("registry", ""),
        )


def mapping_key(namespace: str, release_name: str) -> str:
    return f"{namespace}/{release_name}"
