"""Fetch chart packages into the local chart cache."""

from __future__ import annotations

import abc
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import urljoin

import requests

from helm_version_manager.core.oci_client import OciClient
from helm_version_manager.core.repo_resolver import ChartIndex
from helm_version_manager.errors import NotFoundError, UpstreamError
from helm_version_manager.models.chart import CachedChartArtifact, cache_file_name

logger = logging.getLogger(__name__)


class ChartLocator(abc.ABC):
    def __init__(self, cache_dir: Path):
        self.cache_dir = cache_dir

    def locate(self, registry: str, chart_name: str, version: str) -> CachedChartArtifact:
        if not version or not version.strip():
            raise NotFoundError(f"no chart version given for {chart_name}")
        return self._locate(registry, chart_name, version.strip())

    @abc.abstractmethod
    def _locate(self, registry: str, chart_name: str, version: str) -> CachedChartArtifact:
        ...

    def _cache_path(self, chart_name: str, version: str) -> Path:
        return self.cache_dir / cache_file_name(chart_name, version)

    def _store(self, chart_name: str, version: str, content: bytes) -> CachedChartArtifact:
        path = self._cache_path(chart_name, version)
        tmp_name: str | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            # rename into place; the cache never holds a partial chart
            with tempfile.NamedTemporaryFile(dir=self.cache_dir, prefix=f".{path.name}.", delete=False) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise UpstreamError(f"failed to write chart to {path}: {e}") from e
        logger.debug("Cached %s-%s at %s", chart_name, version, path)
        return CachedChartArtifact(path=path, chart_name=chart_name, version=version)


class OciChartLocator(ChartLocator):
    """Pulls ``<registry>/<chart>:<version>`` and overwrites the cache entry."""

    def __init__(self, client: OciClient, cache_dir: Path):
        super().__init__(cache_dir)
        self.client = client

    def _locate(self, registry: str, chart_name: str, version: str) -> CachedChartArtifact:
        reference = f"{registry.rstrip('/')}/{chart_name}"
        content = self.client.fetch_chart(reference, version)
        return self._store(chart_name, version, content)


class IndexChartLocator(ChartLocator):
    """Finds the version in the cached chart-source indexes, downloading on a cache miss."""

    def __init__(
        self,
        index: ChartIndex,
        cache_dir: Path,
        session: requests.Session | None = None,
        timeout: int = 30,
    ):
        super().__init__(cache_dir)
        self.index = index
        self.session = session or requests.Session()
        self.timeout = timeout

    def _locate(self, registry: str, chart_name: str, version: str) -> CachedChartArtifact:
        cached = self._cache_path(chart_name, version)
        if cached.is_file():
            logger.debug("Reusing cached chart %s", cached)
            return CachedChartArtifact(path=cached, chart_name=chart_name, version=version)

        match = self.index.find(chart_name, version)
        if match is None:
            raise NotFoundError(f"chart {chart_name} version {version} not found in any chart source")
        if not match.urls:
            raise NotFoundError(f"chart {chart_name} version {version} in {match.repo_name} lists no download URL")

        url = urljoin(match.repo_url.rstrip("/") + "/", match.urls[0])
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise UpstreamError(f"failed to download chart {chart_name}-{version} from {url}: {e}") from e
        return self._store(chart_name, version, response.content)
