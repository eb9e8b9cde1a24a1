"""Doctor command for environment diagnostics."""

from __future__ import annotations

import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.shell import SubprocessRunner
from adapters.xcodebuild import Xcodebuild
from core.config import AppSettings
from core.errors import XcodeRunnerError
from core.project_locator import locate_project

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_binary(name: str) -> tuple[bool, str]:
    path = shutil.which(name)
    if path is None:
        return False, "not found on PATH"
    return True, path


def _check_xcodebuild(settings: AppSettings) -> tuple[bool, str]:
    try:
        version = Xcodebuild(SubprocessRunner(), settings).version()
    except XcodeRunnerError as exc:
        return False, str(exc).splitlines()[0]
    return True, version.splitlines()[0] if version else "OK"


def _check_project(directory: Path) -> tuple[bool, str]:
    try:
        project = locate_project(directory)
    except XcodeRunnerError as exc:
        return False, str(exc)
    return True, f"{project.name} ({project.kind.value})"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show the effective configuration."""

    settings = AppSettings()

    table = Table(title="Xcode Runner Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Toolchain
    for binary in (settings.xcodebuild_bin, settings.xcrun_bin):
        ok, detail = _check_binary(binary)
        table.add_row(binary, "OK" if ok else "FAIL", detail)

    ok_version, detail_version = _check_xcodebuild(settings)
    table.add_row("xcodebuild -version", "OK" if ok_version else "FAIL", detail_version)

    # Project
    ok_project, detail_project = _check_project(Path.cwd())
    table.add_row("Project", "OK" if ok_project else "MISSING", detail_project)

    # Config
    table.add_row("Configuration", "OK", settings.configuration)
    table.add_row("Device lister", "OK", settings.device_lister.value)
    table.add_row("Scheme policy", "OK", settings.scheme_policy.value)
    table.add_row("Deploy mode", "OK", "best-effort" if settings.best_effort_deploy else "stop on first failure")

    _console.print(table)

    if not ok_version:
        _console.print(
            "\n[yellow]Note:[/yellow] Install Xcode and run `xcode-select --install` "
            "so that `xcodebuild` and `xcrun` are available."
        )
