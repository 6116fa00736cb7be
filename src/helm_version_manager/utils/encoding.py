"""Base64 / gzip codec for Helm v3 release payloads."""

from __future__ import annotations

import base64
import gzip
import json

_GZIP_MAGIC = b"\x1f\x8b"


def _inflate(blob: bytes) -> dict:
    return json.loads(gzip.decompress(blob).decode("utf-8"))


def decode_release_secret(data: bytes) -> dict:
    """Decode the ``release`` key of a Helm Secret.

    The kubernetes client usually strips the Secret's own base64 layer,
    leaving helm's base64(gzip(json)). Some client versions hand back the
    doubly-encoded value; the gzip magic number tells the two apart.
    """
    decoded = base64.b64decode(data)
    if decoded[:2] != _GZIP_MAGIC:
        decoded = base64.b64decode(decoded)
    return _inflate(decoded)


def decode_release_configmap(data: str) -> dict:
    """Decode the ``release`` key of a Helm ConfigMap (single base64 layer)."""
    decoded = base64.b64decode(data.encode("utf-8"))
    if decoded[:2] != _GZIP_MAGIC:
        decoded = base64.b64decode(decoded)
    return _inflate(decoded)


def encode_release(payload: dict) -> str:
    """Encode a release dict the way helm stores it."""
    compressed = gzip.compress(json.dumps(payload).encode("utf-8"))
    return base64.b64encode(compressed).decode("ascii")
