"""hvm registry - Manage release to upgrade-source mappings."""

from __future__ import annotations

from typing import Optional

import typer

from helm_version_manager.cli.options import ContextOption, OutputOption, get_service, handle_errors
from helm_version_manager.errors import NotFoundError
from helm_version_manager.output.formatters import console, output_mapping, output_mappings

app = typer.Typer(no_args_is_help=True)


@app.command("get")
def get_registry(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Show the registry a release upgrades from."""
    with handle_errors():
        mapping = get_service(context).get_registry(namespace, name)
        if mapping is None:
            raise NotFoundError(f"registry mapping not found for release {namespace}/{name}")
    output_mapping(mapping, output)


@app.command("set")
def set_registry(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    registry: str = typer.Argument(help="oci://host/path or chart repository URL"),
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """Record where a release's chart versions come from."""
    with handle_errors():
        mapping = get_service(context).set_registry(namespace, name, registry)
    output_mapping(mapping, output)


@app.command("delete")
def delete_registry(
    namespace: str = typer.Argument(help="Release namespace"),
    name: str = typer.Argument(help="Release name"),
    context: Optional[str] = ContextOption,
) -> None:
    """Forget a release's registry mapping. Deleting a missing mapping succeeds."""
    with handle_errors():
        get_service(context).delete_registry(namespace, name)
    console.print(f"Registry mapping for {namespace}/{name} deleted.")


@app.command("list")
def list_registries(
    output: str = OutputOption,
    context: Optional[str] = ContextOption,
) -> None:
    """List every registry mapping."""
    with handle_errors():
        mappings = get_service(context).list_registries()
    output_mappings(mappings, output)
