"""hvm repo - Manage chart repositories used by index-file registries."""

from __future__ import annotations

import typer

from helm_version_manager.cli.options import OutputOption, handle_errors
from helm_version_manager.core.repo_manager import RepoManager
from helm_version_manager.output.formatters import console, output_repositories

app = typer.Typer(no_args_is_help=True)


def get_manager() -> RepoManager:
    return RepoManager()


@app.command("list")
def list_repos(output: str = OutputOption) -> None:
    """List configured chart repositories."""
    with handle_errors():
        repos = get_manager().list_repositories()
    output_repositories(repos, output)


@app.command("add")
def add_repo(
    name: str = typer.Argument(help="Repository name"),
    url: str = typer.Argument(help="Repository URL"),
) -> None:
    """Add a chart repository and download its index."""
    with handle_errors():
        repo = get_manager().add_repository(name, url)
    console.print(f"[green]\"{repo.name}\" has been added to your repositories[/green]")


@app.command("remove")
def remove_repo(name: str = typer.Argument(help="Repository name")) -> None:
    """Remove a chart repository and its cached index."""
    with handle_errors():
        get_manager().remove_repository(name)
    console.print(f"\"{name}\" has been removed from your repositories")


@app.command("update")
def update_repo(name: str = typer.Argument(help="Repository name")) -> None:
    """Download a fresh index for a chart repository."""
    with handle_errors():
        get_manager().update_repository(name)
    console.print(f"Successfully got an update from the \"{name}\" chart repository")
