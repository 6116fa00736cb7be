"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

MAPPINGS_CONFIGMAP = "helm-version-manager-registry-mappings"
MAPPINGS_DATA_KEY = "mappings"


def _env_path(*names: str) -> Path | None:
    for name in names:
        value = os.environ.get(name, "")
        if value:
            return Path(value)
    return None


def _default_helm_cache_dir() -> Path:
    """Return the directory holding chart-source index files.

    Follows helm's own lookup order: HELM_REPOSITORY_CACHE, then
    HELM_CACHE_HOME/repository, then the XDG cache home.
    """
    repo_cache = _env_path("HELM_REPOSITORY_CACHE")
    if repo_cache is not None:
        return repo_cache
    cache_home = _env_path("HELM_CACHE_HOME")
    if cache_home is not None:
        return cache_home / "repository"
    xdg = _env_path("XDG_CACHE_HOME")
    if xdg is not None:
        return xdg / "helm" / "repository"
    return Path.home() / ".cache" / "helm" / "repository"


def _default_helm_config_dir() -> Path:
    config_home = _env_path("HELM_CONFIG_HOME")
    if config_home is not None:
        return config_home
    xdg = _env_path("XDG_CONFIG_HOME")
    if xdg is not None:
        return xdg / "helm"
    return Path.home() / ".config" / "helm"


def _default_chart_cache_dir() -> Path:
    explicit = _env_path("HVM_CHART_CACHE")
    if explicit is not None:
        return explicit
    return _default_helm_cache_dir() / "hvm-charts"


def _default_storage_driver() -> str:
    driver = os.environ.get("HELM_DRIVER", "").lower()
    if driver in ("configmap", "configmaps"):
        return "configmaps"
    return "secrets"


@dataclass
class Settings:
    helm_cache_dir: Path = field(default_factory=_default_helm_cache_dir)
    helm_config_dir: Path = field(default_factory=_default_helm_config_dir)
    chart_cache_dir: Path = field(default_factory=_default_chart_cache_dir)
    storage_driver: str = field(default_factory=_default_storage_driver)  # "secrets" or "configmaps"
    mappings_namespace: str = field(default_factory=lambda: os.environ.get("NAMESPACE", "") or "default")
    mappings_configmap: str = MAPPINGS_CONFIGMAP
    helm_binary: str = field(default_factory=lambda: os.environ.get("HVM_HELM_BINARY", "") or "helm")
    default_output: str = "table"
    helm_label_selector: str = "owner=helm"
    secret_type: str = "helm.sh/release.v1"
    version_limit: int = 10
    history_max: int = 10
    request_timeout: int = 30

    @property
    def repositories_file(self) -> Path:
        return self.helm_config_dir / "repositories.yaml"

    @property
    def index_cache_dir(self) -> Path:
        return self.helm_cache_dir

    @property
    def registry_config_file(self) -> Path:
        return self.helm_config_dir / "registry" / "config.json"


# Process-wide defaults; components accept an explicit Settings to override
settings = Settings()
