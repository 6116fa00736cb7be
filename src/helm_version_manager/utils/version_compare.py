"""Chart version parsing and update classification."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version


def parse_version(v: str) -> Version | None:
    """Parse a chart version, tolerating a leading ``v``; None if unparseable."""
    for candidate in (v, v[1:] if v.startswith("v") else None):
        if not candidate:
            continue
        try:
            return Version(candidate)
        except InvalidVersion:
            continue
    return None


def classify_update(current: str, candidate: str) -> str:
    """How moving from ``current`` to ``candidate`` changes the version.

    One of "current", "major", "minor", "patch", "older" or "unknown" when
    either side is not a valid version.
    """
    cur = parse_version(current)
    cand = parse_version(candidate)

    if cur is None or cand is None:
        return "unknown"
    if cand == cur:
        return "current"
    if cand < cur:
        return "older"
    if cand.major > cur.major:
        return "major"
    if cand.minor > cur.minor:
        return "minor"
    return "patch"
