"""Upgrade, values-edit, rollback and version-listing workflows.

Each workflow reads the release, reads its registry mapping (failing with
MappingRequired before any registry traffic), resolves or locates the chart,
merges values and calls the deployment engine. Nothing is written until the
final engine call, so a failure at any earlier step leaves no trace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from helm_version_manager.core.chart_sources import ChartSources
from helm_version_manager.core.deploy_engine import DeploymentEngine
from helm_version_manager.core.mapping_store import MappingStore
from helm_version_manager.core.values import merge_values
from helm_version_manager.errors import MappingRequired, UpstreamError, ValidationError
from helm_version_manager.models.chart import ChartVersionCandidate
from helm_version_manager.models.registry import RegistryMapping
from helm_version_manager.models.release import HelmRelease

logger = logging.getLogger(__name__)


@dataclass
class UpgradePlan:
    """What an upgrade would apply, computed without touching the registry."""

    release: HelmRelease
    mapping: RegistryMapping
    chart_name: str
    target_version: str
    values: dict[str, Any]


class UpgradeOrchestrator:
    def __init__(self, engine: DeploymentEngine, mappings: MappingStore, sources: ChartSources):
        self.engine = engine
        self.mappings = mappings
        self.sources = sources

    def _require_mapping(self, namespace: str, name: str) -> RegistryMapping:
        mapping = self.mappings.get(namespace, name)
        if mapping is None:
            raise MappingRequired(namespace, name)
        return mapping

    def plan_upgrade(
        self,
        namespace: str,
        name: str,
        target_version: str | None = None,
        values_override: dict[str, Any] | None = None,
    ) -> UpgradePlan:
        """Read the release and mapping and merge values; ``None`` keeps the current version."""
        release = self.engine.get_release(namespace, name)
        mapping = self._require_mapping(namespace, name)
        return UpgradePlan(
            release=release,
            mapping=mapping,
            chart_name=release.chart_name,
            target_version=target_version or release.chart_version,
            values=merge_values(release.config, values_override),
        )

    def apply(self, plan: UpgradePlan) -> HelmRelease:
        source = self.sources.for_registry(plan.mapping.registry)
        chart = source.locator.locate(plan.mapping.registry, plan.chart_name, plan.target_version)
        return self.engine.upgrade(
            plan.release.namespace or plan.mapping.namespace,
            plan.release.name or plan.mapping.release_name,
            chart,
            plan.values,
            reuse_values=True,
        )

    def upgrade_to_version(
        self,
        namespace: str,
        name: str,
        target_version: str,
        values_override: dict[str, Any] | None = None,
    ) -> HelmRelease:
        if not target_version or not target_version.strip():
            raise ValidationError("chartVersion is required")
        plan = self.plan_upgrade(namespace, name, target_version.strip(), values_override)
        return _with_context(self.apply, plan, "upgrade")

    def update_values(self, namespace: str, name: str, values_delta: dict[str, Any]) -> HelmRelease:
        if values_delta is None:
            raise ValidationError("values is required")
        plan = self.plan_upgrade(namespace, name, None, values_delta)
        return _with_context(self.apply, plan, "update values of")

    def rollback(self, namespace: str, name: str, revision: int) -> HelmRelease:
        if revision is None or revision < 1:
            raise ValidationError("revision must be a positive integer")
        self.engine.rollback(namespace, name, revision)
        return self.engine.get_release(namespace, name)

    def list_versions(self, namespace: str, name: str) -> list[ChartVersionCandidate]:
        release = self.engine.get_release(namespace, name)
        mapping = self._require_mapping(namespace, name)
        source = self.sources.for_registry(mapping.registry)
        logger.debug("Resolving versions of %s from %s", release.chart_name, mapping.registry)
        return source.resolver.resolve(mapping.registry, release.chart_name)


def _with_context(apply, plan: UpgradePlan, action: str) -> HelmRelease:
    try:
        return apply(plan)
    except UpstreamError as e:
        ref = f"{plan.mapping.registry}/{plan.chart_name}:{plan.target_version}"
        raise UpstreamError(
            f"failed to {action} release {plan.mapping.namespace}/{plan.mapping.release_name} "
            f"with chart {ref}: {e.reason}"
        ) from e
