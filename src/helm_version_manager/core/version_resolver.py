"""Resolve the candidate upgrade versions of a chart.

Two strategies exist. Content registries (``oci://``) are asked for their tag
list, which is reversed so the most recent tags come first and then capped.
Classic chart sources are looked up in their cached index files; that output
is neither reordered nor capped, so callers see every version each source
lists, in the index's own order.
"""

from __future__ import annotations

import abc
import logging

from helm_version_manager.core.oci_client import OciClient
from helm_version_manager.core.repo_resolver import ChartIndex
from helm_version_manager.models.chart import ChartVersionCandidate

logger = logging.getLogger(__name__)

DEFAULT_VERSION_LIMIT = 10


class VersionResolver(abc.ABC):
    @abc.abstractmethod
    def resolve(self, registry: str, chart_name: str) -> list[ChartVersionCandidate]:
        """Return available versions of ``chart_name`` from ``registry``."""


class OciVersionResolver(VersionResolver):
    def __init__(self, client: OciClient, limit: int = DEFAULT_VERSION_LIMIT):
        self.client = client
        self.limit = limit

    def resolve(self, registry: str, chart_name: str) -> list[ChartVersionCandidate]:
        reference = f"{registry.rstrip('/')}/{chart_name}"
        tags = self.client.list_tags(reference)
        newest_first = list(reversed(tags))[: self.limit]
        return [ChartVersionCandidate(version=tag) for tag in newest_first]


class IndexVersionResolver(VersionResolver):
    def __init__(self, index: ChartIndex):
        self.index = index

    def resolve(self, registry: str, chart_name: str) -> list[ChartVersionCandidate]:
        # registry is not used to narrow the search: every configured source is consulted
        candidates = self.index.versions(chart_name)
        logger.debug("Found %d indexed versions of %s", len(candidates), chart_name)
        return candidates
