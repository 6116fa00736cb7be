"""
Shared fixtures and fakes.

The fakes stand in for the two outside systems every workflow touches:
the shared configuration record (a ConfigMap in a cluster) and the
deployment engine (helm plus the cluster's release storage).
"""

from __future__ import annotations

import base64
import copy
from pathlib import Path
from types import SimpleNamespace

import pytest
import yaml

from helm_version_manager.config.settings import Settings
from helm_version_manager.core.chart_locator import ChartLocator
from helm_version_manager.core.chart_sources import ChartSource, ChartSources
from helm_version_manager.core.mapping_store import MappingStore
from helm_version_manager.core.orchestrator import UpgradeOrchestrator
from helm_version_manager.core.repo_resolver import index_path_for
from helm_version_manager.core.service import ReleaseService
from helm_version_manager.core.version_resolver import VersionResolver
from helm_version_manager.errors import NotFoundError
from helm_version_manager.models import SourceKind
from helm_version_manager.models.chart import CachedChartArtifact, ChartVersionCandidate
from helm_version_manager.models.release import HelmRelease, RevisionRecord
from helm_version_manager.utils.encoding import encode_release


# ---------------------------------------------------
# Release payloads
# ---------------------------------------------------

def release_payload(
    name: str = "checkout",
    namespace: str = "payments",
    chart: str = "checkout",
    chart_version: str = "1.0.0",
    revision: int = 3,
    config: dict | None = None,
    status: str = "deployed",
    app_version: str = "",
) -> dict:
    """A release document shaped like the JSON helm stores."""
    return {
        "name": name,
        "namespace": namespace,
        "version": revision,
        "info": {
            "first_deployed": "2024-01-01T10:00:00Z",
            "last_deployed": f"2024-01-0{min(revision, 9)}T10:00:00Z",
            "status": status,
            "description": "Upgrade complete",
        },
        "chart": {"metadata": {"name": chart, "version": chart_version, "appVersion": app_version}},
        "config": config if config is not None else {},
    }


def make_release(**kwargs) -> HelmRelease:
    return HelmRelease.from_dict(release_payload(**kwargs))


def write_sources(settings: Settings, sources: dict[str, tuple[str, dict | None]]) -> None:
    """Write repositories.yaml and, where given, each source's cached index."""
    settings.helm_config_dir.mkdir(parents=True, exist_ok=True)
    settings.helm_cache_dir.mkdir(parents=True, exist_ok=True)
    settings.repositories_file.write_text(yaml.safe_dump({
        "apiVersion": "",
        "repositories": [{"name": name, "url": url} for name, (url, _) in sources.items()],
    }))
    for name, (_, entries) in sources.items():
        if entries is not None:
            index_path_for(settings, name).write_text(
                yaml.safe_dump({"apiVersion": "v1", "entries": entries})
            )


def secret_object(payload: dict, object_name: str | None = None) -> SimpleNamespace:
    """A Secret as the kubernetes client returns it (API base64 over helm's encoding)."""
    stored = encode_release(payload)
    return SimpleNamespace(
        data={"release": base64.b64encode(stored.encode("ascii")).decode("ascii")},
        metadata=SimpleNamespace(
            name=object_name or f"sh.helm.release.v1.{payload['name']}.v{payload['version']}",
            namespace=payload["namespace"],
            labels={
                "name": payload["name"],
                "owner": "helm",
                "status": payload["info"]["status"],
                "version": str(payload["version"]),
            },
        ),
    )


# ---------------------------------------------------
# Fakes
# ---------------------------------------------------

class InMemoryRecordStore:
    def __init__(self, records: dict[str, str] | None = None):
        self.records = dict(records or {})
        self.writes = 0

    def read_record(self, key: str) -> str | None:
        return self.records.get(key)

    def write_record(self, key: str, document: str) -> None:
        self.records[key] = document
        self.writes += 1


class FakeEngine:
    """Deployment engine keeping releases in memory; upgrades bump the revision."""

    def __init__(self, releases: list[HelmRelease] = ()):
        self.releases = {(r.namespace, r.name): r for r in releases}
        self.upgrades: list[dict] = []
        self.rollbacks: list[tuple[str, str, int]] = []

    def list_releases(self) -> list[HelmRelease]:
        return sorted(self.releases.values(), key=lambda r: (r.namespace, r.name))

    def get_release(self, namespace: str, name: str) -> HelmRelease:
        try:
            return copy.deepcopy(self.releases[(namespace, name)])
        except KeyError:
            raise NotFoundError(f"release {namespace}/{name} not found") from None

    def get_history(self, namespace: str, name: str) -> list[RevisionRecord]:
        return [RevisionRecord.from_release(self.get_release(namespace, name))]

    def upgrade(self, namespace, name, chart: CachedChartArtifact, values, reuse_values=True) -> HelmRelease:
        self.upgrades.append({
            "namespace": namespace,
            "name": name,
            "chart": chart,
            "values": values,
            "reuse_values": reuse_values,
        })
        current = self.releases[(namespace, name)]
        upgraded = make_release(
            name=name,
            namespace=namespace,
            chart=current.chart_name,
            chart_version=chart.version,
            revision=current.version + 1,
            config=values,
        )
        self.releases[(namespace, name)] = upgraded
        return copy.deepcopy(upgraded)

    def rollback(self, namespace: str, name: str, revision: int) -> None:
        self.get_release(namespace, name)
        self.rollbacks.append((namespace, name, revision))
        current = self.releases[(namespace, name)]
        current.version += 1


class FakeResolver(VersionResolver):
    def __init__(self, versions: list[str] = ()):
        self.versions = list(versions)
        self.calls: list[tuple[str, str]] = []

    def resolve(self, registry, chart_name):
        self.calls.append((registry, chart_name))
        return [ChartVersionCandidate(version=v) for v in self.versions]


class FakeLocator(ChartLocator):
    def __init__(self, cache_dir: Path):
        super().__init__(cache_dir)
        self.calls: list[tuple[str, str, str]] = []

    def _locate(self, registry, chart_name, version):
        self.calls.append((registry, chart_name, version))
        return CachedChartArtifact(path=self._cache_path(chart_name, version), chart_name=chart_name, version=version)


# ---------------------------------------------------
# Fixtures
# ---------------------------------------------------

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings rooted in a temporary directory."""
    return Settings(
        helm_cache_dir=tmp_path / "cache",
        helm_config_dir=tmp_path / "config",
        chart_cache_dir=tmp_path / "charts",
        mappings_namespace="hvm-system",
    )


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def mapping_store(record_store) -> MappingStore:
    return MappingStore(record_store)


@pytest.fixture
def checkout_release() -> HelmRelease:
    return make_release(config={"replicas": 2, "image": {"tag": "1.0.0"}})


@pytest.fixture
def engine(checkout_release) -> FakeEngine:
    return FakeEngine([
        checkout_release,
        make_release(name="web", namespace="frontend", chart="nginx", chart_version="15.0.0", revision=1),
    ])


@pytest.fixture
def oci_resolver() -> FakeResolver:
    return FakeResolver(["1.2.0", "1.1.0", "1.0.0"])


@pytest.fixture
def oci_locator(tmp_path) -> FakeLocator:
    return FakeLocator(tmp_path / "charts")


@pytest.fixture
def index_resolver() -> FakeResolver:
    return FakeResolver(["15.1.0", "15.0.0"])


@pytest.fixture
def index_locator(tmp_path) -> FakeLocator:
    return FakeLocator(tmp_path / "charts")


@pytest.fixture
def sources(oci_resolver, oci_locator, index_resolver, index_locator) -> ChartSources:
    return ChartSources({
        SourceKind.OCI: ChartSource(resolver=oci_resolver, locator=oci_locator),
        SourceKind.INDEX: ChartSource(resolver=index_resolver, locator=index_locator),
    })


@pytest.fixture
def orchestrator(engine, mapping_store, sources) -> UpgradeOrchestrator:
    return UpgradeOrchestrator(engine, mapping_store, sources)


@pytest.fixture
def service(engine, mapping_store, orchestrator) -> ReleaseService:
    return ReleaseService(engine, mapping_store, orchestrator)
