"""Shared configuration records backed by a single Kubernetes ConfigMap."""

from __future__ import annotations

import logging
from typing import Protocol

from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError as TransportError

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.core.k8s_client import K8sClient
from helm_version_manager.errors import UpstreamError

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def read_record(self, key: str) -> str | None:
        """Return the stored document, or None if there is none."""
        ...

    def write_record(self, key: str, document: str) -> None:
        ...


class ConfigMapRecordStore:
    """Stores each record as one data key of a ConfigMap.

    The ConfigMap is created on first write. Writes replace the whole object
    without a resourceVersion precondition, so concurrent writers in
    different processes overwrite each other (last write wins).
    """

    def __init__(self, k8s: K8sClient, settings: Settings | None = None):
        self.k8s = k8s
        self.settings = settings or default_settings

    @property
    def location(self) -> str:
        return f"{self.settings.mappings_namespace}/{self.settings.mappings_configmap}"

    def read_record(self, key: str) -> str | None:
        try:
            data = self.k8s.read_config_map_data(
                self.settings.mappings_configmap, self.settings.mappings_namespace,
            )
        except (ApiException, TransportError) as e:
            raise UpstreamError(f"failed to get configmap {self.location}: {_describe(e)}") from e
        if data is None:
            logger.debug("ConfigMap %s does not exist yet", self.location)
            return None
        return data.get(key) or None

    def write_record(self, key: str, document: str) -> None:
        try:
            data = self.k8s.read_config_map_data(
                self.settings.mappings_configmap, self.settings.mappings_namespace,
            ) or {}
            data[key] = document
            self.k8s.write_config_map_data(
                self.settings.mappings_configmap, self.settings.mappings_namespace, data,
            )
        except (ApiException, TransportError) as e:
            raise UpstreamError(f"failed to update configmap {self.location}: {_describe(e)}") from e


def _describe(e: Exception) -> str:
    if isinstance(e, ApiException):
        return f"{e.status} {e.reason}"
    return str(e)
