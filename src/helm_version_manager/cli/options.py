"""Shared CLI options and helpers."""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import typer
import yaml

from helm_version_manager.core.service import ReleaseService, build_service
from helm_version_manager.errors import HvmError, ValidationError

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
NamespaceOption = typer.Option(None, "--namespace", "-n", help="Kubernetes namespace (default: all)")
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")
SetJsonOption = typer.Option(None, "--set-json", help="Top-level values overrides as a JSON object")
ValuesFileOption = typer.Option(None, "--values", "-f", help="YAML file of top-level values overrides")
DryRunOption = typer.Option(False, "--dry-run", help="Show the values changes without applying them")


def get_service(context: Optional[str]) -> ReleaseService:
    return build_service(context=context)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report HvmError as ``<kind>: <reason>`` on stderr and exit non-zero."""
    try:
        yield
    except HvmError as e:
        typer.echo(f"{e.kind}: {e.reason}", err=True)
        raise typer.Exit(code=2 if isinstance(e, ValidationError) else 1) from e


def load_values(set_json: Optional[str], values_file: Optional[Path]) -> Optional[dict[str, Any]]:
    """Combine ``--values`` and ``--set-json``; the JSON keys win. None if neither given."""
    if set_json is None and values_file is None:
        return None
    values: dict[str, Any] = {}
    if values_file is not None:
        try:
            loaded = yaml.safe_load(values_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ValidationError(f"cannot read values file {values_file}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ValidationError(f"values file {values_file} must hold a mapping")
        values.update(loaded or {})
    if set_json is not None:
        try:
            parsed = json.loads(set_json)
        except json.JSONDecodeError as e:
            raise ValidationError(f"--set-json is not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise ValidationError("--set-json must be a JSON object")
        values.update(parsed)
    return values
