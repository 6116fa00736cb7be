"""Kubernetes API wrapper."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
from kubernetes.client import ApiException

from helm_version_manager.config.settings import Settings, settings as default_settings


class K8sClient:
    """Thin wrapper around the Kubernetes Python client."""

    def __init__(self, context: str | None = None, settings: Settings | None = None):
        self.context = context
        self.settings = settings or default_settings
        self._core_v1: client.CoreV1Api | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    def _release_label(self, release_name: str | None) -> str:
        label = self.settings.helm_label_selector
        if release_name:
            label += f",name={release_name}"
        return label

    def list_helm_secrets(
        self, namespace: str | None = None, release_name: str | None = None,
    ) -> list[Any]:
        """List Helm release secrets, optionally filtered by namespace and release name."""
        label = self._release_label(release_name)
        field_selector = f"type={self.settings.secret_type}"
        timeout = self.settings.request_timeout
        if namespace:
            result = self.core_v1.list_namespaced_secret(
                namespace=namespace,
                label_selector=label,
                field_selector=field_selector,
                _request_timeout=timeout,
            )
        else:
            result = self.core_v1.list_secret_for_all_namespaces(
                label_selector=label,
                field_selector=field_selector,
                _request_timeout=timeout,
            )
        return result.items

    def list_helm_configmaps(
        self, namespace: str | None = None, release_name: str | None = None,
    ) -> list[Any]:
        """List Helm release ConfigMaps."""
        label = self._release_label(release_name)
        timeout = self.settings.request_timeout
        if namespace:
            result = self.core_v1.list_namespaced_config_map(
                namespace=namespace,
                label_selector=label,
                _request_timeout=timeout,
            )
        else:
            result = self.core_v1.list_config_map_for_all_namespaces(
                label_selector=label,
                _request_timeout=timeout,
            )
        return result.items

    def read_config_map_data(self, name: str, namespace: str) -> dict[str, str] | None:
        """Return a ConfigMap's data, or None if the ConfigMap does not exist."""
        try:
            cm = self.core_v1.read_namespaced_config_map(
                name=name,
                namespace=namespace,
                _request_timeout=self.settings.request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return dict(cm.data or {})

    def write_config_map_data(self, name: str, namespace: str, data: dict[str, str]) -> None:
        """Merge ``data`` into the ConfigMap, keeping its metadata, or create it if absent."""
        timeout = self.settings.request_timeout
        try:
            cm = self.core_v1.read_namespaced_config_map(
                name=name,
                namespace=namespace,
                _request_timeout=timeout,
            )
        except ApiException as e:
            if e.status != 404:
                raise
            cm = None

        if cm is not None:
            cm.data = {**(cm.data or {}), **data}
            # unconditional replace: the last writer wins
            cm.metadata.resource_version = None
            try:
                self.core_v1.replace_namespaced_config_map(
                    name=name,
                    namespace=namespace,
                    body=cm,
                    _request_timeout=timeout,
                )
                return
            except ApiException as e:
                if e.status != 404:
                    raise

        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            data=data,
        )
        self.core_v1.create_namespaced_config_map(
            namespace=namespace,
            body=body,
            _request_timeout=timeout,
        )
