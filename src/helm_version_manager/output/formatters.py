"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from helm_version_manager.core.orchestrator import UpgradePlan
from helm_version_manager.models.chart import ChartVersionCandidate
from helm_version_manager.models.registry import RegistryMapping
from helm_version_manager.models.release import HelmRelease, RevisionRecord
from helm_version_manager.models.repo import Repository
from helm_version_manager.utils.version_compare import classify_update

console = Console()


def _print_data(data: Any, fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2, default=str))
    else:
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False), markup=False, soft_wrap=True)


def output_releases(releases: list[HelmRelease], fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _print_data([r.to_dict() for r in releases], fmt)
    else:
        from helm_version_manager.output.tables import release_list_table
        console.print(release_list_table(releases))


def output_release_info(
    release: HelmRelease,
    fmt: str,
    mapping: RegistryMapping | None = None,
    show_values: bool = False,
) -> None:
    if fmt in ("json", "yaml"):
        data = release.to_dict()
        data["description"] = release.chart.description
        if mapping is not None:
            data["registry"] = mapping.registry
        if show_values:
            data["values"] = release.config
        _print_data(data, fmt)
    else:
        from helm_version_manager.output.tables import release_info_panel, values_panel
        console.print(release_info_panel(release, mapping=mapping))
        if show_values:
            console.print(values_panel(release.config))


def output_history(revisions: list[RevisionRecord], fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _print_data([r.to_dict() for r in revisions], fmt)
    else:
        from helm_version_manager.output.tables import history_table
        console.print(history_table(revisions))


def output_versions(candidates: list[ChartVersionCandidate], fmt: str, current: str = "") -> None:
    if fmt in ("json", "yaml"):
        data = []
        for c in candidates:
            entry = c.to_dict()
            if current:
                entry["update"] = classify_update(current, c.version)
            data.append(entry)
        _print_data(data, fmt)
    else:
        from helm_version_manager.output.tables import versions_table
        console.print(versions_table(candidates, current=current))


def output_values(values: dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        _print_data(values, fmt)
    elif fmt == "yaml":
        console.print(yaml.dump(values, default_flow_style=False) if values else "{}", markup=False, soft_wrap=True)
    else:
        from helm_version_manager.output.tables import values_panel
        console.print(values_panel(values))


def output_mappings(mappings: list[RegistryMapping], fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _print_data([m.to_dict() for m in mappings], fmt)
    else:
        from helm_version_manager.output.tables import mapping_table
        console.print(mapping_table(mappings))


def output_mapping(mapping: RegistryMapping, fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _print_data(mapping.to_dict(), fmt)
    else:
        from helm_version_manager.output.tables import mapping_panel
        console.print(mapping_panel(mapping))


def output_repositories(repos: list[Repository], fmt: str) -> None:
    if fmt in ("json", "yaml"):
        _print_data([r.to_dict() for r in repos], fmt)
    else:
        from helm_version_manager.output.tables import repository_table
        console.print(repository_table(repos))


def output_plan(plan: UpgradePlan, changes: list[str], fmt: str) -> None:
    """Describe an upgrade that was planned but not applied."""
    if fmt in ("json", "yaml"):
        _print_data({
            "namespace": plan.release.namespace,
            "name": plan.release.name,
            "registry": plan.mapping.registry,
            "chart": plan.chart_name,
            "fromVersion": plan.release.chart_version,
            "toVersion": plan.target_version,
            "changes": changes,
            "values": plan.values,
        }, fmt)
    else:
        from helm_version_manager.output.tables import changes_panel
        console.print(
            f"[bold]Dry run:[/bold] {plan.release.namespace}/{plan.release.name} "
            f"{plan.chart_name} {plan.release.chart_version} -> {plan.target_version} "
            f"from {plan.mapping.registry}"
        )
        console.print(changes_panel(changes, "Values Changes"))
