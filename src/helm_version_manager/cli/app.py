"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="hvm",
    help="Helm Version Manager - Upgrade Helm releases from their recorded chart registries.",
    no_args_is_help=True,
)


@app.callback()
def root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _register_commands() -> None:
    from helm_version_manager.cli.commands.releases_cmd import app as releases_app
    from helm_version_manager.cli.commands.registry_cmd import app as registry_app
    from helm_version_manager.cli.commands.repo_cmd import app as repo_app

    app.add_typer(releases_app, name="releases", help="Inspect, upgrade and roll back releases")
    app.add_typer(registry_app, name="registry", help="Manage release registry mappings")
    app.add_typer(repo_app, name="repo", help="Manage chart repositories")


_register_commands()


def main() -> None:
    app()
