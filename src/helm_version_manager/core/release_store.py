"""Read Helm releases straight from the cluster's release storage objects."""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError as TransportError

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.core.helm_decoder import decode_release, label_metadata
from helm_version_manager.core.k8s_client import K8sClient
from helm_version_manager.errors import NotFoundError, UpstreamError
from helm_version_manager.models.release import HelmRelease


class ReleaseStore:
    """Lists and fetches Helm releases from Secrets or ConfigMaps."""

    def __init__(self, k8s: K8sClient, settings: Settings | None = None):
        self.k8s = k8s
        self.settings = settings or default_settings

    def _objects(self, namespace: str | None, release_name: str | None = None) -> list[Any]:
        try:
            if self.settings.storage_driver == "configmaps":
                return self.k8s.list_helm_configmaps(namespace=namespace, release_name=release_name)
            return self.k8s.list_helm_secrets(namespace=namespace, release_name=release_name)
        except (ApiException, TransportError) as e:
            scope = f"{namespace or '*'}/{release_name or '*'}"
            raise UpstreamError(f"failed to list helm release objects for {scope}: {e}") from e

    def _decode(self, obj: Any) -> HelmRelease | None:
        return decode_release(obj, driver=self.settings.storage_driver)

    def list_releases(self, namespace: str | None = None) -> list[HelmRelease]:
        """List the latest revision of each Helm release, sorted by namespace then name."""
        grouped: dict[tuple[str, str], list[tuple[int, Any]]] = defaultdict(list)
        for obj in self._objects(namespace):
            meta = label_metadata(obj)
            grouped[(meta["name"], meta["namespace"])].append((meta["version"], obj))

        releases: list[HelmRelease] = []
        for versions in grouped.values():
            _, latest_obj = max(versions, key=lambda x: x[0])
            release = self._decode(latest_obj)
            if release:
                releases.append(release)

        releases.sort(key=lambda r: (r.namespace, r.name))
        return releases

    def get_release(self, namespace: str, name: str) -> HelmRelease:
        """Return the latest revision of a release.

        Raises NotFoundError when no revision is stored and UpstreamError when
        the newest revision cannot be decoded.
        """
        objects = self._objects(namespace, release_name=name)
        if not objects:
            raise NotFoundError(f"release {namespace}/{name} not found")
        latest = max(objects, key=lambda o: label_metadata(o)["version"])
        release = self._decode(latest)
        if release is None:
            raise UpstreamError(f"release record {latest.metadata.name} for {namespace}/{name} is unreadable")
        return release

    def get_revisions(self, namespace: str, name: str, max_revisions: int | None = None) -> list[HelmRelease]:
        """Return stored revisions of a release, oldest first, keeping the newest ``max_revisions``."""
        revisions = [r for r in map(self._decode, self._objects(namespace, release_name=name)) if r]
        if not revisions:
            raise NotFoundError(f"release {namespace}/{name} not found")
        revisions.sort(key=lambda r: r.version)
        if max_revisions:
            revisions = revisions[-max_revisions:]
        return revisions
