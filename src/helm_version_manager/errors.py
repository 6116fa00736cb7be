"""Error kinds reported by every public operation."""

from __future__ import annotations


class HvmError(Exception):
    """Base class; ``kind`` names the failure category shown to callers."""

    kind = "error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return self.reason

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "reason": self.reason}


class ValidationError(HvmError):
    """A required field is missing or empty."""

    kind = "validation"


class NotFoundError(HvmError):
    """A release, mapping, chart version or repository does not exist."""

    kind = "not_found"


class MappingRequired(HvmError):
    """The operation needs a registry mapping the release does not have."""

    kind = "mapping_required"

    def __init__(self, namespace: str, name: str):
        super().__init__(
            f"registry mapping not found for release {namespace}/{name}, "
            "please set registry first"
        )
        self.namespace = namespace
        self.name = name


class UpstreamError(HvmError):
    """The deployment engine, configuration store or a registry call failed."""

    kind = "upstream"


class ConflictError(HvmError):
    """A non-idempotent create hit an entry that already exists."""

    kind = "conflict"
