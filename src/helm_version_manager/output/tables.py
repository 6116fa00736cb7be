"""Rich table builders for each command."""

from __future__ import annotations

import yaml
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from helm_version_manager.models.chart import ChartVersionCandidate
from helm_version_manager.models.registry import RegistryMapping
from helm_version_manager.models.release import HelmRelease, RevisionRecord
from helm_version_manager.models.repo import Repository
from helm_version_manager.output.themes import styled_flag, styled_status, styled_update
from helm_version_manager.utils.version_compare import classify_update


def release_list_table(releases: list[HelmRelease]) -> Table:
    table = Table(title="Helm Releases", expand=True, show_lines=False)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Release", style="bold white", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Rev", justify="right", style="dim")
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Chart Ver", style="magenta")
    table.add_column("App Ver", style="cyan")
    table.add_column("Registry", no_wrap=True)
    table.add_column("Updated", style="dim", no_wrap=True)

    for r in releases:
        table.add_row(
            r.namespace,
            r.name,
            styled_status(r.status),
            str(r.version),
            r.chart_name,
            r.chart_version,
            r.app_version,
            styled_flag(r.has_registry),
            r.updated_short,
        )
    return table


def release_info_panel(release: HelmRelease, mapping: RegistryMapping | None = None) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Release", release.name)
    table.add_row("Namespace", release.namespace)
    table.add_row("Status", styled_status(release.status))
    table.add_row("Revision", str(release.version))
    table.add_row("Chart", f"{release.chart_name}-{release.chart_version}")
    table.add_row("App Version", release.app_version or "-")
    table.add_row("Description", release.chart.description or "-")
    table.add_row("Last Deployed", release.updated_short or "-")
    if mapping is not None:
        table.add_row("Registry", mapping.registry)
    else:
        table.add_row("Registry", styled_flag(release.has_registry))

    return Panel(table, title=f"[bold]Release: {release.name}[/bold]", border_style="blue")


def values_panel(config: dict, title: str = "User-Supplied Values") -> Panel:
    text = yaml.dump(config, default_flow_style=False) if config else "(no user-supplied values)"
    syntax = Syntax(text, "yaml", theme="monokai", line_numbers=False)
    return Panel(syntax, title=f"[bold]{title}[/bold]", border_style="green")


def history_table(revisions: list[RevisionRecord]) -> Table:
    table = Table(title="Release History", expand=True)
    table.add_column("Revision", justify="right", style="bold")
    table.add_column("Status", no_wrap=True)
    table.add_column("Chart Ver", style="magenta")
    table.add_column("App Ver", style="cyan")
    table.add_column("Updated", style="dim", no_wrap=True)
    table.add_column("Description", max_width=40)

    for r in revisions:
        table.add_row(
            str(r.revision),
            styled_status(r.status),
            r.chart_version,
            r.app_version,
            r.updated_short,
            r.description or "",
        )
    return table


def versions_table(candidates: list[ChartVersionCandidate], current: str = "") -> Table:
    table = Table(title="Available Chart Versions", expand=True)
    table.add_column("Version", style="magenta", no_wrap=True)
    table.add_column("App Ver", style="cyan")
    table.add_column("Update", no_wrap=True)
    table.add_column("Description", max_width=50)

    for c in candidates:
        table.add_row(
            c.version,
            c.app_version or "-",
            styled_update(classify_update(current, c.version)) if current else "-",
            c.description or "",
        )
    return table


def mapping_table(mappings: list[RegistryMapping]) -> Table:
    table = Table(title="Registry Mappings", expand=True)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Release", style="bold white", no_wrap=True)
    table.add_column("Chart", style="magenta")
    table.add_column("Registry", style="cyan")
    for m in mappings:
        table.add_row(m.namespace, m.release_name, m.chart_name, m.registry)
    return table


def mapping_panel(mapping: RegistryMapping) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Release", f"{mapping.namespace}/{mapping.release_name}")
    table.add_row("Chart", mapping.chart_name)
    table.add_row("Registry", mapping.registry)
    return Panel(table, title="[bold]Registry Mapping[/bold]", border_style="cyan")


def repository_table(repos: list[Repository]) -> Table:
    table = Table(title="Chart Repositories", expand=True)
    table.add_column("Name", style="bold white", no_wrap=True)
    table.add_column("URL", style="cyan")
    for r in repos:
        table.add_row(r.name, r.url)
    return table


def changes_panel(changes: list[str], title: str) -> Panel:
    body = "\n".join(f"- {c}" for c in changes) if changes else "(no values changes)"
    return Panel(Text(body), title=f"[bold]{title}[/bold]", border_style="yellow")
