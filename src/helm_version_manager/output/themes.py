"""Status and update-kind color maps."""

from helm_version_manager.models.release import ReleaseStatus

STATUS_COLORS: dict[ReleaseStatus, str] = {
    ReleaseStatus.DEPLOYED: "green",
    ReleaseStatus.FAILED: "red bold",
    ReleaseStatus.SUPERSEDED: "dim",
    ReleaseStatus.PENDING_INSTALL: "yellow",
    ReleaseStatus.PENDING_UPGRADE: "yellow",
    ReleaseStatus.PENDING_ROLLBACK: "yellow",
    ReleaseStatus.UNINSTALLING: "magenta",
    ReleaseStatus.UNINSTALLED: "dim",
    ReleaseStatus.UNKNOWN: "red",
}

UPDATE_COLORS: dict[str, str] = {
    "current": "bold green",
    "major": "red",
    "minor": "yellow",
    "patch": "cyan",
    "older": "dim",
}


def styled_status(status: ReleaseStatus) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"


def styled_update(kind: str) -> str:
    color = UPDATE_COLORS.get(kind, "white")
    return f"[{color}]{kind}[/{color}]"


def styled_flag(value: bool) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"
