"""Tests for reading releases from helm's storage objects."""

import base64
from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from conftest import release_payload, secret_object
from kubernetes.client import ApiException

from helm_version_manager.core.helm_decoder import decode_release, label_metadata
from helm_version_manager.core.release_store import ReleaseStore
from helm_version_manager.errors import NotFoundError, UpstreamError
from helm_version_manager.models.release import ReleaseStatus
from helm_version_manager.utils.encoding import encode_release


def _store(settings, objects, driver="secrets"):
    k8s = MagicMock()
    k8s.list_helm_secrets.return_value = objects
    k8s.list_helm_configmaps.return_value = objects
    return ReleaseStore(k8s, settings=replace(settings, storage_driver=driver)), k8s


class TestDecodeRelease:
    def test_decodes_secret(self):
        obj = secret_object(release_payload(config={"replicas": 2}))
        release = decode_release(obj)
        assert release.name == "checkout"
        assert release.chart_version == "1.0.0"
        assert release.config == {"replicas": 2}
        assert release.status == ReleaseStatus.DEPLOYED

    def test_decodes_single_encoded_secret(self):
        payload = release_payload()
        obj = SimpleNamespace(data={"release": encode_release(payload)}, metadata=None)
        assert decode_release(obj).name == "checkout"

    def test_decodes_configmap(self):
        payload = release_payload()
        obj = SimpleNamespace(data={"release": encode_release(payload)}, metadata=None)
        assert decode_release(obj, driver="configmaps").namespace == "payments"

    def test_corrupt_payload_is_skipped(self):
        obj = SimpleNamespace(
            data={"release": base64.b64encode(b"garbage").decode()},
            metadata=SimpleNamespace(name="broken", namespace="x", labels={}),
        )
        assert decode_release(obj) is None

    def test_label_metadata(self):
        meta = label_metadata(secret_object(release_payload(revision=7)))
        assert meta == {"name": "checkout", "namespace": "payments", "status": "deployed", "version": 7}


class TestReleaseStore:
    def test_list_keeps_latest_revision(self, settings):
        store, _ = _store(settings, [
            secret_object(release_payload(revision=1, chart_version="0.9.0", status="superseded")),
            secret_object(release_payload(revision=3, chart_version="1.0.0")),
            secret_object(release_payload(revision=2, chart_version="0.9.5", status="superseded")),
            secret_object(release_payload(name="web", namespace="frontend", chart="nginx", revision=1)),
        ])

        releases = store.list_releases()

        assert [(r.namespace, r.name, r.version) for r in releases] == [
            ("frontend", "web", 1),
            ("payments", "checkout", 3),
        ]
        assert releases[1].chart_version == "1.0.0"

    def test_configmap_driver(self, settings):
        store, k8s = _store(settings, [], driver="configmaps")
        store.list_releases()
        k8s.list_helm_configmaps.assert_called_once()
        k8s.list_helm_secrets.assert_not_called()

    def test_get_release(self, settings):
        store, k8s = _store(settings, [
            secret_object(release_payload(revision=2)),
            secret_object(release_payload(revision=3)),
        ])
        assert store.get_release("payments", "checkout").version == 3
        k8s.list_helm_secrets.assert_called_once_with(namespace="payments", release_name="checkout")

    def test_get_missing_release(self, settings):
        store, _ = _store(settings, [])
        with pytest.raises(NotFoundError, match="release payments/ghost not found"):
            store.get_release("payments", "ghost")

    def test_unreadable_latest_revision_is_upstream(self, settings):
        broken = secret_object(release_payload(revision=4), object_name="sh.helm.release.v1.checkout.v4")
        broken.data = {"release": base64.b64encode(b"garbage").decode()}
        store, _ = _store(settings, [secret_object(release_payload(revision=3)), broken])

        with pytest.raises(UpstreamError, match="sh.helm.release.v1.checkout.v4"):
            store.get_release("payments", "checkout")

    def test_api_failure_is_upstream(self, settings):
        store, k8s = _store(settings, [])
        k8s.list_helm_secrets.side_effect = ApiException(status=500, reason="Internal Server Error")
        with pytest.raises(UpstreamError):
            store.list_releases()

    def test_revisions_oldest_first_and_limited(self, settings):
        store, _ = _store(settings, [
            secret_object(release_payload(revision=r)) for r in (5, 1, 4, 2, 3)
        ])
        revisions = store.get_revisions("payments", "checkout", max_revisions=3)
        assert [r.version for r in revisions] == [3, 4, 5]
