"""hvm releases - Inspect, upgrade and roll back Helm releases."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from helm_version_manager.cli.options import (
    ContextOption,
    DryRunOption,
    NamespaceOption,
    OutputOption,
    SetJsonOption,
    ValuesFileOption,
    get_service,
    handle_errors,
    load_values,
)
from helm_version_manager.errors import ValidationError
from helm_version_manager.output.formatters import (
    console,
    output_history,
    output_plan,
    output_release_info,
    output_releases,
    output_values,
    output_versions,
)

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_releases(
    output: str = OutputOption,
    namespace: Optional[str] = NamespaceOption,
    context: Optional[str] = ContextOption,
    has_registry: Optional[bool] = typer.Option(
        None, "--has-registry/--no-registry", help="Only releases with (or without) a registry mapping",
    ),
) -> None:
    """List Helm releases and whether each has a registry mapping."""
    with handle_errors():
        releases = get_service(context).list_releases(namespace=namespace, has_registry=has_registry)
    output_releases(releases, output)


@app.command("get")
def get_release(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
    show_values: bool = typer.Option(False, "--values", help="Show user-supplied values"),
) -> None:
    """Show a release and its registry mapping."""
    with handle_errors():
        service = get_service(context)
        release = service.get_release(namespace, name)
        mapping = service.get_registry(namespace, name)
    output_release_info(release, output, mapping=mapping, show_values=show_values)


@app.command("versions")
def list_versions(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """List chart versions available from the release's registry."""
    with handle_errors():
        service = get_service(context)
        release = service.get_release(namespace, name)
        candidates = service.list_versions(namespace, name)
    output_versions(candidates, output, current=release.chart_version)


@app.command("history")
def history(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Show the revision history of a release, oldest first."""
    with handle_errors():
        revisions = get_service(context).get_history(namespace, name)
    output_history(revisions, output)


@app.command("values")
def values(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Show the user-supplied values of a release."""
    with handle_errors():
        config = get_service(context).get_values(namespace, name)
    output_values(config, output)


@app.command("upgrade")
def upgrade(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    version: str = typer.Argument(help="Target chart version"),
    set_json: Optional[str] = SetJsonOption,
    values_file: Optional[Path] = ValuesFileOption,
    dry_run: bool = DryRunOption,
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Upgrade a release to a chart version from its mapped registry."""
    with handle_errors():
        overrides = load_values(set_json, values_file)
        service = get_service(context)
        if dry_run:
            plan, changes = service.preview(namespace, name, version, overrides)
            output_plan(plan, changes, output)
            return
        release = service.upgrade(namespace, name, version, overrides)
    if output == "table":
        console.print(f"[green]Upgraded {namespace}/{name} to {release.chart_version} "
                      f"(revision {release.version})[/green]")
    output_release_info(release, output)


@app.command("set-values")
def set_values(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    set_json: Optional[str] = SetJsonOption,
    values_file: Optional[Path] = ValuesFileOption,
    dry_run: bool = DryRunOption,
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Re-deploy the current chart version with changed top-level values."""
    with handle_errors():
        overrides = load_values(set_json, values_file)
        if overrides is None:
            raise ValidationError("values is required, pass --set-json or --values")
        service = get_service(context)
        if dry_run:
            plan, changes = service.preview(namespace, name, None, overrides)
            output_plan(plan, changes, output)
            return
        release = service.update_values(namespace, name, overrides)
    if output == "table":
        console.print(f"[green]Updated values of {namespace}/{name} (revision {release.version})[/green]")
    output_release_info(release, output)


@app.command("rollback")
def rollback(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    revision: int = typer.Argument(help="Revision to roll back to"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Roll a release back to an earlier revision."""
    with handle_errors():
        release = get_service(context).rollback(namespace, name, revision)
    if output == "table":
        console.print(f"[green]Rolled back {namespace}/{name} to revision {revision}[/green]")
    output_release_info(release, output)
