"""Run helm CLI commands that mutate releases.

Reads go through the cluster's release storage (see release_store); only the
operations that need helm's rendering and apply logic shell out.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from helm_version_manager.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    success: bool
    stdout: str
    stderr: str
    returncode: int

    @property
    def error_text(self) -> str:
        return (self.stderr or self.stdout).strip() or f"exit code {self.returncode}"


class CommandRunner:
    """Executes a command and captures its output."""

    def run(self, cmd: Sequence[str]) -> CommandResult:
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                list(cmd),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            # Binary missing or not executable
            return CommandResult(success=False, stdout="", stderr=str(e), returncode=127)
        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )


class HelmCommands:
    """Helm upgrade / rollback invocations."""

    def __init__(self, runner: CommandRunner | None = None, settings: Settings | None = None):
        self._runner = runner or CommandRunner()
        self.settings = settings or default_settings

    def upgrade(
        self,
        release_name: str,
        chart_path: Path,
        namespace: str,
        *,
        values_file: Path | None = None,
        reuse_values: bool = True,
    ) -> CommandResult:
        """Upgrade an existing release from a packaged chart, printing the release as JSON."""
        cmd = [
            self.settings.helm_binary,
            "upgrade",
            release_name,
            str(chart_path),
            "--namespace",
            namespace,
            "--output",
            "json",
        ]
        if reuse_values:
            cmd.append("--reuse-values")
        if values_file is not None:
            cmd.extend(["--values", str(values_file)])
        return self._runner.run(cmd)

    def rollback(self, release_name: str, namespace: str, revision: int) -> CommandResult:
        cmd = [
            self.settings.helm_binary,
            "rollback",
            release_name,
            str(revision),
            "--namespace",
            namespace,
        ]
        return self._runner.run(cmd)
