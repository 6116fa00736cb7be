"""Data models for Helm Version Manager."""

from __future__ import annotations

import enum

OCI_SCHEME = "oci://"


class SourceKind(enum.Enum):
    OCI = "oci"
    INDEX = "index"

    @classmethod
    def for_registry(cls, registry: str) -> SourceKind:
        """Pick the resolution strategy from the registry reference's scheme."""
        if registry.strip().lower().startswith(OCI_SCHEME):
            return cls.OCI
        return cls.INDEX
