"""Release values: shallow override merge and change descriptions."""

from __future__ import annotations

import copy
from typing import Any

from deepdiff import DeepDiff


def merge_values(current: dict[str, Any], override: dict[str, Any] | None) -> dict[str, Any]:
    """Overlay ``override`` on ``current`` one top-level key at a time.

    A key present in both takes the override's whole value, nested maps
    included. Keys only in ``current`` are kept untouched. Neither input is
    modified.
    """
    merged = copy.deepcopy(current or {})
    for key, value in (override or {}).items():
        merged[key] = copy.deepcopy(value)
    return merged


def describe_value_changes(current: dict[str, Any], effective: dict[str, Any]) -> list[str]:
    """Human-readable list of differences between two values documents."""
    diff = DeepDiff(current or {}, effective or {}, verbose_level=2)
    details: list[str] = []

    for path, change in diff.get("values_changed", {}).items():
        details.append(f"Changed {path}: {change['old_value']!r} -> {change['new_value']!r}")
    for path, change in diff.get("type_changes", {}).items():
        details.append(f"Changed {path}: {change['old_value']!r} -> {change['new_value']!r}")
    for path, value in diff.get("dictionary_item_added", {}).items():
        details.append(f"Added {path}: {value!r}")
    for path, value in diff.get("dictionary_item_removed", {}).items():
        details.append(f"Removed {path}: {value!r}")
    for path, value in diff.get("iterable_item_added", {}).items():
        details.append(f"List item added {path}: {value!r}")
    for path, value in diff.get("iterable_item_removed", {}).items():
        details.append(f"List item removed {path}: {value!r}")

    return details
