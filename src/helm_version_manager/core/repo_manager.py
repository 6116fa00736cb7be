"""Manage classic chart sources in helm's repositories.yaml."""

from __future__ import annotations

import logging
import threading

import requests
import yaml

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.core.repo_resolver import (
    ChartIndex,
    discard_sidecar,
    index_path_for,
    load_repositories,
)
from helm_version_manager.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from helm_version_manager.models.repo import Repository

logger = logging.getLogger(__name__)


class RepoManager:
    """Add, remove and refresh chart sources and their cached index files."""

    def __init__(
        self,
        settings: Settings | None = None,
        index: ChartIndex | None = None,
        session: requests.Session | None = None,
    ):
        self.settings = settings or default_settings
        self.index = index
        self.session = session or requests.Session()
        self._lock = threading.Lock()

    def list_repositories(self) -> list[Repository]:
        return [Repository(name=n, url=u) for n, u in load_repositories(self.settings).items()]

    def add_repository(self, name: str, url: str) -> Repository:
        if not name or not url:
            raise ValidationError("name and url are required")
        if not url.startswith(("http://", "https://")):
            raise ValidationError(f"url must be an http(s) URL, got {url!r}")
        with self._lock:
            repos = load_repositories(self.settings)
            if name in repos:
                raise ConflictError(f"repository {name} already exists")
            self._download_index(name, url)
            repos[name] = url
            self._write(repos)
        logger.info("Added chart source %s (%s)", name, url)
        return Repository(name=name, url=url)

    def remove_repository(self, name: str) -> None:
        with self._lock:
            repos = load_repositories(self.settings)
            if name not in repos:
                raise NotFoundError(f"repository {name} not found")
            del repos[name]
            self._write(repos)
            index_file = index_path_for(self.settings, name)
            try:
                discard_sidecar(index_file)
                index_file.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise UpstreamError(f"failed to remove index file {index_file}: {e}") from e
        self._invalidate()
        logger.info("Removed chart source %s", name)

    def update_repository(self, name: str) -> None:
        with self._lock:
            repos = load_repositories(self.settings)
            if name not in repos:
                raise NotFoundError(f"repository {name} not found")
            self._download_index(name, repos[name])
        logger.info("Refreshed index of chart source %s", name)

    def _download_index(self, name: str, url: str) -> None:
        index_url = url.rstrip("/") + "/index.yaml"
        try:
            response = self.session.get(index_url, timeout=self.settings.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise UpstreamError(f"failed to download index file {index_url}: {e}") from e
        try:
            data = yaml.safe_load(response.text)
        except yaml.YAMLError as e:
            raise UpstreamError(f"{index_url} is not a valid chart index: {e}") from e
        if not isinstance(data, dict) or "entries" not in data:
            raise UpstreamError(f"{index_url} is not a valid chart index")

        index_file = index_path_for(self.settings, name)
        try:
            index_file.parent.mkdir(parents=True, exist_ok=True)
            discard_sidecar(index_file)
            index_file.write_text(response.text, encoding="utf-8")
        except OSError as e:
            raise UpstreamError(f"failed to write index file {index_file}: {e}") from e
        self._invalidate()

    def _write(self, repos: dict[str, str]) -> None:
        repos_file = self.settings.repositories_file
        existing: dict = {}
        if repos_file.exists():
            try:
                existing = yaml.safe_load(repos_file.read_text(encoding="utf-8")) or {}
            except (OSError, yaml.YAMLError) as e:
                raise UpstreamError(f"failed to load repo file {repos_file}: {e}") from e
        # keep helm's per-entry fields (credentials, TLS settings) for surviving repos
        entries = {r.get("name"): r for r in existing.get("repositories") or [] if isinstance(r, dict)}
        existing.setdefault("apiVersion", "")
        existing["repositories"] = [
            {**entries.get(n, {}), "name": n, "url": u} for n, u in repos.items()
        ]
        try:
            repos_file.parent.mkdir(parents=True, exist_ok=True)
            repos_file.write_text(yaml.safe_dump(existing, default_flow_style=False), encoding="utf-8")
        except OSError as e:
            raise UpstreamError(f"failed to write repo file {repos_file}: {e}") from e

    def _invalidate(self) -> None:
        if self.index is not None:
            self.index.clear()
