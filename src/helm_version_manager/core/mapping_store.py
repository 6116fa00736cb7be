"""Persistent namespace/release -> upgrade registry mappings.

All mappings live in one JSON document (``{"<ns>/<release>": {...}}``) kept
in a single shared configuration record. Every operation reads the whole
document; ``set`` and ``delete`` rewrite it under the write side of a
process-wide readers-writer lock, ``get`` and ``list`` hold the read side.

The lock only orders callers inside this process. Two processes writing the
same record can still lose each other's updates (last write wins); running a
single replica is the caller's decision.
"""

from __future__ import annotations

import json
import logging

from helm_version_manager.config.settings import MAPPINGS_DATA_KEY
from helm_version_manager.core.config_record import RecordStore
from helm_version_manager.errors import UpstreamError, ValidationError
from helm_version_manager.models.registry import RegistryMapping, mapping_key
from helm_version_manager.utils.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class MappingStore:
    """The single authority on whether a release has an upgrade source.

    Build one per process and hand it to every component that needs it.
    """

    def __init__(self, records: RecordStore, record_key: str = MAPPINGS_DATA_KEY):
        self.records = records
        self.record_key = record_key
        self._lock = ReadWriteLock()

    def get(self, namespace: str, release_name: str) -> RegistryMapping | None:
        with self._lock.read():
            mappings = self._load()
        return mappings.get(mapping_key(namespace, release_name))

    def set(self, mapping: RegistryMapping) -> None:
        _validate(mapping)
        with self._lock.write():
            mappings = self._load()
            mappings[mapping.key] = mapping
            self._save(mappings)
        logger.info("Set registry mapping %s -> %s", mapping.key, mapping.registry)

    def delete(self, namespace: str, release_name: str) -> None:
        key = mapping_key(namespace, release_name)
        with self._lock.write():
            mappings = self._load()
            if mappings.pop(key, None) is None:
                logger.debug("No registry mapping for %s, nothing to delete", key)
                return
            self._save(mappings)
        logger.info("Deleted registry mapping %s", key)

    def list(self) -> list[RegistryMapping]:
        with self._lock.read():
            return list(self._load().values())

    def _load(self) -> dict[str, RegistryMapping]:
        raw = self.records.read_record(self.record_key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise UpstreamError(f"failed to unmarshal registry mappings: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamError("failed to unmarshal registry mappings: document is not an object")
        return {key: RegistryMapping.from_dict(value) for key, value in data.items()}

    def _save(self, mappings: dict[str, RegistryMapping]) -> None:
        document = json.dumps({key: m.to_dict() for key, m in mappings.items()}, sort_keys=True)
        self.records.write_record(self.record_key, document)


def _validate(mapping: RegistryMapping) -> None:
    if not mapping.namespace or not mapping.release_name:
        raise ValidationError("namespace and name are required")
    if not mapping.registry or not mapping.registry.strip():
        raise ValidationError("registry is required")
