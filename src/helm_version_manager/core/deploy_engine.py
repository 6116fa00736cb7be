"""Deployment engine: release reads plus helm upgrade / rollback."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Protocol

import yaml

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.core.helm_cli import HelmCommands
from helm_version_manager.core.release_store import ReleaseStore
from helm_version_manager.errors import UpstreamError
from helm_version_manager.models.chart import CachedChartArtifact
from helm_version_manager.models.release import HelmRelease, RevisionRecord

logger = logging.getLogger(__name__)


class DeploymentEngine(Protocol):
    def list_releases(self) -> list[HelmRelease]: ...

    def get_release(self, namespace: str, name: str) -> HelmRelease: ...

    def get_history(self, namespace: str, name: str) -> list[RevisionRecord]: ...

    def upgrade(
        self,
        namespace: str,
        name: str,
        chart: CachedChartArtifact,
        values: dict[str, Any],
        reuse_values: bool = True,
    ) -> HelmRelease: ...

    def rollback(self, namespace: str, name: str, revision: int) -> None: ...


class HelmEngine:
    """DeploymentEngine backed by the cluster's release storage and the helm CLI."""

    def __init__(
        self,
        releases: ReleaseStore,
        helm: HelmCommands | None = None,
        settings: Settings | None = None,
    ):
        self.releases = releases
        self.settings = settings or default_settings
        self.helm = helm or HelmCommands(settings=self.settings)

    def list_releases(self) -> list[HelmRelease]:
        return self.releases.list_releases()

    def get_release(self, namespace: str, name: str) -> HelmRelease:
        return self.releases.get_release(namespace, name)

    def get_history(self, namespace: str, name: str) -> list[RevisionRecord]:
        revisions = self.releases.get_revisions(namespace, name, max_revisions=self.settings.history_max)
        return [RevisionRecord.from_release(r) for r in revisions]

    def upgrade(
        self,
        namespace: str,
        name: str,
        chart: CachedChartArtifact,
        values: dict[str, Any],
        reuse_values: bool = True,
    ) -> HelmRelease:
        with tempfile.TemporaryDirectory(prefix="hvm-values-") as tmp:
            values_file = Path(tmp) / "values.yaml"
            values_file.write_text(yaml.safe_dump(values, default_flow_style=False), encoding="utf-8")
            logger.info(
                "Upgrading %s/%s to %s-%s", namespace, name, chart.chart_name, chart.version,
            )
            result = self.helm.upgrade(
                name, chart.path, namespace, values_file=values_file, reuse_values=reuse_values,
            )
        if not result.success:
            raise UpstreamError(f"failed to upgrade release {namespace}/{name}: {result.error_text}")
        release = _parse_release(result.stdout)
        if release is None:
            logger.debug("helm upgrade printed no release JSON, re-reading %s/%s", namespace, name)
            return self.get_release(namespace, name)
        if not release.namespace:
            release.namespace = namespace
        return release

    def rollback(self, namespace: str, name: str, revision: int) -> None:
        logger.info("Rolling back %s/%s to revision %d", namespace, name, revision)
        result = self.helm.rollback(name, namespace, revision)
        if not result.success:
            raise UpstreamError(
                f"failed to rollback release {namespace}/{name} to revision {revision}: "
                f"{result.error_text}"
            )


def _parse_release(stdout: str) -> HelmRelease | None:
    text = stdout.strip()
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return HelmRelease.from_dict(data)
