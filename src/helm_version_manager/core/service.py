"""Release and registry-mapping operations exposed to the command line and other front ends."""

from __future__ import annotations

from typing import Any

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.core.chart_sources import ChartSources
from helm_version_manager.core.config_record import ConfigMapRecordStore
from helm_version_manager.core.deploy_engine import DeploymentEngine, HelmEngine
from helm_version_manager.core.k8s_client import K8sClient
from helm_version_manager.core.mapping_store import MappingStore
from helm_version_manager.core.orchestrator import UpgradeOrchestrator, UpgradePlan
from helm_version_manager.core.release_store import ReleaseStore
from helm_version_manager.core.values import describe_value_changes
from helm_version_manager.errors import ValidationError
from helm_version_manager.models.chart import ChartVersionCandidate
from helm_version_manager.models.registry import RegistryMapping, mapping_key
from helm_version_manager.models.release import HelmRelease, RevisionRecord


def _require(namespace: str, name: str) -> None:
    if not namespace or not name:
        raise ValidationError("namespace and name are required")


class ReleaseService:
    """One call per upward operation; validates input before any I/O."""

    def __init__(self, engine: DeploymentEngine, mappings: MappingStore, orchestrator: UpgradeOrchestrator):
        self.engine = engine
        self.mappings = mappings
        self.orchestrator = orchestrator

    # -- releases ---------------------------------------------------------

    def list_releases(
        self,
        namespace: str | None = None,
        has_registry: bool | None = None,
    ) -> list[HelmRelease]:
        """All releases annotated with ``has_registry``, optionally filtered."""
        mapped = {m.key for m in self.mappings.list()}
        result: list[HelmRelease] = []
        for release in self.engine.list_releases():
            release.has_registry = mapping_key(release.namespace, release.name) in mapped
            if namespace and release.namespace != namespace:
                continue
            if has_registry is not None and release.has_registry != has_registry:
                continue
            result.append(release)
        return result

    def get_release(self, namespace: str, name: str) -> HelmRelease:
        _require(namespace, name)
        release = self.engine.get_release(namespace, name)
        release.has_registry = self.mappings.get(namespace, name) is not None
        return release

    def list_versions(self, namespace: str, name: str) -> list[ChartVersionCandidate]:
        _require(namespace, name)
        return self.orchestrator.list_versions(namespace, name)

    def upgrade(
        self,
        namespace: str,
        name: str,
        chart_version: str,
        values: dict[str, Any] | None = None,
    ) -> HelmRelease:
        _require(namespace, name)
        if not chart_version:
            raise ValidationError("chartVersion is required")
        return self.orchestrator.upgrade_to_version(namespace, name, chart_version, values)

    def get_history(self, namespace: str, name: str) -> list[RevisionRecord]:
        _require(namespace, name)
        return self.engine.get_history(namespace, name)

    def get_values(self, namespace: str, name: str) -> dict[str, Any]:
        _require(namespace, name)
        return self.engine.get_release(namespace, name).config

    def update_values(self, namespace: str, name: str, values: dict[str, Any]) -> HelmRelease:
        _require(namespace, name)
        if values is None:
            raise ValidationError("values is required")
        return self.orchestrator.update_values(namespace, name, values)

    def rollback(self, namespace: str, name: str, revision: int) -> HelmRelease:
        _require(namespace, name)
        return self.orchestrator.rollback(namespace, name, revision)

    def preview(
        self,
        namespace: str,
        name: str,
        chart_version: str | None,
        values: dict[str, Any] | None,
    ) -> tuple[UpgradePlan, list[str]]:
        """Plan an upgrade or values edit and describe its values changes, without applying it."""
        _require(namespace, name)
        plan = self.orchestrator.plan_upgrade(namespace, name, chart_version, values)
        return plan, describe_value_changes(plan.release.config, plan.values)

    # -- registry mappings -------------------------------------------------

    def get_registry(self, namespace: str, name: str) -> RegistryMapping | None:
        _require(namespace, name)
        return self.mappings.get(namespace, name)

    def set_registry(self, namespace: str, name: str, registry: str) -> RegistryMapping:
        _require(namespace, name)
        if not registry or not registry.strip():
            raise ValidationError("registry is required")
        release = self.engine.get_release(namespace, name)
        mapping = RegistryMapping(
            namespace=namespace,
            release_name=name,
            chart_name=release.chart_name,
            registry=registry.strip(),
        )
        self.mappings.set(mapping)
        return mapping

    def delete_registry(self, namespace: str, name: str) -> None:
        _require(namespace, name)
        self.mappings.delete(namespace, name)

    def list_registries(self) -> list[RegistryMapping]:
        return self.mappings.list()


def build_service(settings: Settings | None = None, context: str | None = None) -> ReleaseService:
    """Wire every component once for this process."""
    settings = settings or default_settings
    k8s = K8sClient(context=context, settings=settings)
    mappings = MappingStore(ConfigMapRecordStore(k8s, settings=settings))
    engine = HelmEngine(ReleaseStore(k8s, settings=settings), settings=settings)
    sources = ChartSources.default(settings=settings)
    orchestrator = UpgradeOrchestrator(engine, mappings, sources)
    return ReleaseService(engine, mappings, orchestrator)
