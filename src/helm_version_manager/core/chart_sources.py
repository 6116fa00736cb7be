"""Pick the version resolver / chart locator pair for a registry reference."""

from __future__ import annotations

from dataclasses import dataclass

from helm_version_manager.config.settings import Settings, settings as default_settings
from helm_version_manager.core.chart_locator import ChartLocator, IndexChartLocator, OciChartLocator
from helm_version_manager.core.oci_client import OciClient
from helm_version_manager.core.repo_resolver import ChartIndex
from helm_version_manager.core.version_resolver import (
    IndexVersionResolver,
    OciVersionResolver,
    VersionResolver,
)
from helm_version_manager.errors import ValidationError
from helm_version_manager.models import SourceKind


@dataclass
class ChartSource:
    resolver: VersionResolver
    locator: ChartLocator


class ChartSources:
    """Registry of strategies keyed by the kind of registry reference."""

    def __init__(self, strategies: dict[SourceKind, ChartSource]):
        self.strategies = strategies

    def for_registry(self, registry: str) -> ChartSource:
        if not registry or not registry.strip():
            raise ValidationError("registry is required")
        kind = SourceKind.for_registry(registry)
        try:
            return self.strategies[kind]
        except KeyError:
            raise ValidationError(f"no chart source configured for {kind.value} registries") from None

    @classmethod
    def default(
        cls,
        settings: Settings | None = None,
        oci: OciClient | None = None,
        index: ChartIndex | None = None,
    ) -> ChartSources:
        settings = settings or default_settings
        oci = oci or OciClient(settings=settings)
        index = index or ChartIndex(settings=settings)
        return cls({
            SourceKind.OCI: ChartSource(
                resolver=OciVersionResolver(oci, limit=settings.version_limit),
                locator=OciChartLocator(oci, settings.chart_cache_dir),
            ),
            SourceKind.INDEX: ChartSource(
                resolver=IndexVersionResolver(index),
                locator=IndexChartLocator(index, settings.chart_cache_dir, timeout=settings.request_timeout),
            ),
        })
