"""Decode Helm v3 release records from Kubernetes Secrets or ConfigMaps."""

from __future__ import annotations

import logging
from typing import Any

from helm_version_manager.models.release import HelmRelease
from helm_version_manager.utils.encoding import decode_release_configmap, decode_release_secret

logger = logging.getLogger(__name__)


def decode_release(obj: Any, driver: str = "secrets") -> HelmRelease | None:
    """Decode one storage object into a HelmRelease, or None if it is unreadable."""
    data = getattr(obj, "data", None)
    if not data or "release" not in data:
        return None
    try:
        raw = data["release"]
        if driver == "configmaps":
            payload = decode_release_configmap(raw)
        else:
            if isinstance(raw, str):
                raw = raw.encode("utf-8")
            payload = decode_release_secret(raw)
    except (ValueError, OSError, EOFError):
        # binascii.Error and json.JSONDecodeError are ValueErrors, gzip raises OSError
        logger.debug("Failed to decode release object %s", object_name(obj), exc_info=True)
        return None
    release = HelmRelease.from_dict(payload)
    if not release.namespace and obj.metadata:
        release.namespace = obj.metadata.namespace or ""
    return release


def label_metadata(obj: Any) -> dict:
    """Read name / namespace / status / revision from labels without decoding."""
    labels: dict[str, str] = {}
    namespace = ""
    metadata = getattr(obj, "metadata", None)
    if metadata:
        labels = dict(metadata.labels or {})
        namespace = metadata.namespace or ""
    try:
        revision = int(labels.get("version", "0"))
    except ValueError:
        revision = 0
    return {
        "name": labels.get("name", ""),
        "namespace": namespace,
        "status": labels.get("status", ""),
        "version": revision,
    }


def object_name(obj: Any) -> str:
    metadata = getattr(obj, "metadata", None)
    if metadata:
        return metadata.name or "<unknown>"
    return "<unknown>"
