"""Tests for UpgradeOrchestrator: upgrade, values edits, rollback, version listing."""

import pytest

from helm_version_manager.errors import MappingRequired, NotFoundError, UpstreamError, ValidationError
from helm_version_manager.models.registry import RegistryMapping


def _map(store, registry="oci://example.com/charts", namespace="payments", name="checkout", chart="checkout"):
    store.set(RegistryMapping(namespace=namespace, release_name=name, chart_name=chart, registry=registry))


class TestUpgradeToVersion:
    def test_upgrade_from_content_registry(self, orchestrator, mapping_store, engine, oci_locator):
        _map(mapping_store)

        release = orchestrator.upgrade_to_version("payments", "checkout", "1.1.0", {"replicas": 3})

        assert release.chart_version == "1.1.0"
        assert release.version == 4
        assert release.config == {"replicas": 3, "image": {"tag": "1.0.0"}}
        assert oci_locator.calls == [("oci://example.com/charts", "checkout", "1.1.0")]
        assert engine.upgrades[0]["reuse_values"] is True

    def test_upgrade_from_index_source(self, orchestrator, mapping_store, index_locator, oci_locator):
        _map(mapping_store, registry="https://charts.bitnami.com/bitnami", namespace="frontend", name="web", chart="nginx")

        release = orchestrator.upgrade_to_version("frontend", "web", "15.1.0")

        assert release.chart_version == "15.1.0"
        assert index_locator.calls == [("https://charts.bitnami.com/bitnami", "nginx", "15.1.0")]
        assert oci_locator.calls == []

    def test_without_mapping_makes_no_registry_call(self, orchestrator, engine, oci_locator, index_locator):
        with pytest.raises(MappingRequired) as exc:
            orchestrator.upgrade_to_version("payments", "checkout", "1.1.0")

        assert "please set registry first" in exc.value.reason
        assert oci_locator.calls == [] and index_locator.calls == []
        assert engine.upgrades == []

    def test_missing_release_checked_before_mapping(self, orchestrator):
        with pytest.raises(NotFoundError):
            orchestrator.upgrade_to_version("payments", "ghost", "1.1.0")

    @pytest.mark.parametrize("version", ["", "   "])
    def test_version_required(self, orchestrator, mapping_store, version):
        _map(mapping_store)
        with pytest.raises(ValidationError):
            orchestrator.upgrade_to_version("payments", "checkout", version)

    def test_values_override_replaces_whole_top_level_key(self, orchestrator, mapping_store, engine):
        _map(mapping_store)
        orchestrator.upgrade_to_version("payments", "checkout", "1.1.0", {"image": {"repository": "shop/checkout"}})
        assert engine.upgrades[0]["values"] == {"replicas": 2, "image": {"repository": "shop/checkout"}}

    def test_locator_failure_leaves_release_untouched(self, orchestrator, mapping_store, engine, oci_locator):
        _map(mapping_store)

        def fail(*args):
            raise UpstreamError("registry unreachable")

        oci_locator._locate = fail

        with pytest.raises(UpstreamError) as exc:
            orchestrator.upgrade_to_version("payments", "checkout", "1.1.0")

        assert "oci://example.com/charts/checkout:1.1.0" in exc.value.reason
        assert engine.upgrades == []
        assert engine.get_release("payments", "checkout").version == 3


class TestUpdateValues:
    def test_keeps_current_chart_version(self, orchestrator, mapping_store, engine, oci_locator):
        _map(mapping_store)

        release = orchestrator.update_values("payments", "checkout", {"replicas": 5})

        assert release.chart_version == "1.0.0"
        assert release.config == {"replicas": 5, "image": {"tag": "1.0.0"}}
        assert oci_locator.calls == [("oci://example.com/charts", "checkout", "1.0.0")]

    def test_shallow_merge(self, orchestrator, mapping_store, engine):
        engine.releases[("payments", "checkout")].config = {"x": 1, "y": 2}
        _map(mapping_store)

        release = orchestrator.update_values("payments", "checkout", {"x": 5})

        assert release.config == {"x": 5, "y": 2}

    def test_requires_mapping(self, orchestrator):
        with pytest.raises(MappingRequired):
            orchestrator.update_values("payments", "checkout", {"x": 5})

    def test_none_values_rejected(self, orchestrator, mapping_store):
        _map(mapping_store)
        with pytest.raises(ValidationError):
            orchestrator.update_values("payments", "checkout", None)


class TestRollback:
    def test_rollback_returns_current_release(self, orchestrator, engine):
        release = orchestrator.rollback("payments", "checkout", 2)

        assert engine.rollbacks == [("payments", "checkout", 2)]
        assert release.version == 4

    def test_rollback_needs_no_mapping(self, orchestrator, mapping_store):
        assert mapping_store.get("payments", "checkout") is None
        orchestrator.rollback("payments", "checkout", 1)

    @pytest.mark.parametrize("revision", [0, -1])
    def test_revision_must_be_positive(self, orchestrator, engine, revision):
        with pytest.raises(ValidationError):
            orchestrator.rollback("payments", "checkout", revision)
        assert engine.rollbacks == []


class TestListVersions:
    def test_uses_release_chart_name(self, orchestrator, mapping_store, oci_resolver):
        _map(mapping_store, chart="something-else")

        versions = orchestrator.list_versions("payments", "checkout")

        assert [v.version for v in versions] == ["1.2.0", "1.1.0", "1.0.0"]
        assert oci_resolver.calls == [("oci://example.com/charts", "checkout")]

    def test_without_mapping_makes_no_registry_call(self, orchestrator, oci_resolver, index_resolver):
        with pytest.raises(MappingRequired):
            orchestrator.list_versions("payments", "checkout")
        assert oci_resolver.calls == [] and index_resolver.calls == []

    def test_index_registry_uses_index_strategy(self, orchestrator, mapping_store, index_resolver):
        _map(mapping_store, registry="https://charts.bitnami.com/bitnami", namespace="frontend", name="web", chart="nginx")
        versions = orchestrator.list_versions("frontend", "web")
        assert [v.version for v in versions] == ["15.1.0", "15.0.0"]
