"""CLI de xcode-runner (Typer + Rich).

La CLI solo traduce flags a `AppSettings`/`RunRequest` y pinta resultados;
toda la secuencia vive en `core.services.build_pipeline`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.text import Text

from adapters.choosers import PresetChooser, RichChooser
from adapters.shell import SubprocessRunner
from cli import doctor
from cli.logging_setup import configure_logging
from cli.ui_components import (
    build_deploy_table,
    build_devices_table,
    build_schemes_table,
    build_target_panel,
    print_banner,
)
from core.config import AppSettings, DeviceListerKind, SchemePolicy
from core.errors import DeviceNotFound, XcodeRunnerError
from core.interfaces.chooser import Chooser
from core.interfaces.toolchain import CommandRunner
from core.project_locator import locate_project
from core.services.build_pipeline import (
    PipelineHooks,
    RunRequest,
    Stage,
    list_devices,
    list_schemes,
    resolve_target,
    run_workflow,
    scheme_chooser,
)

app = typer.Typer(
    no_args_is_help=True,
    help="Build an Xcode scheme and run it on a simulator or a physical device.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()

_STAGE_LABELS: dict[Stage, str] = {
    Stage.LOCATE_PROJECT: "project detection",
    Stage.LIST_SCHEMES: "fetching schemes",
    Stage.SELECT_SCHEME: "scheme selection",
    Stage.LIST_DEVICES: "fetching devices",
    Stage.SELECT_DEVICE: "device selection",
    Stage.QUERY_BUILD_SETTINGS: "build settings lookup",
    Stage.BUILD: "build",
    Stage.DEPLOY: "install/launch",
}


def _build_runner() -> CommandRunner:
    return SubprocessRunner()


def _build_chooser() -> Chooser:
    return RichChooser(_console)


def _settings_with(**overrides: object) -> AppSettings:
    """Settings from env/.env with the non-None CLI flags applied on top."""

    settings = AppSettings()
    update = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=update)


def _report_error(exc: XcodeRunnerError, stage: Stage | None = None) -> None:
    label = _STAGE_LABELS.get(stage) if stage else None
    prefix = f"Error during {label}: " if label else "Error: "
    _console.print(Text.assemble("❌ ", (prefix, "bold red"), str(exc)))


def _print_stage(stage: Stage, detail: str) -> None:
    if stage is Stage.LIST_SCHEMES:
        _console.print("Fetching schemes...", style="dim")
    elif stage is Stage.LIST_DEVICES:
        _console.print(f"Fetching devices ({detail})...", style="dim")
    elif stage is Stage.QUERY_BUILD_SETTINGS:
        _console.print("Resolving build settings...", style="dim")
    elif stage is Stage.BUILD:
        _console.print(Text(f"\n🔨 Building {detail}...", style="bold"))
    elif stage is Stage.DEPLOY:
        if detail == "simulator":
            _console.print("\n📲 Installing & launching app on simulator...", style="bold")
        else:
            _console.print("\n🔗 Deploying to physical device...", style="bold")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every external command."),
) -> None:
    configure_logging(AppSettings().log_level, verbose=verbose)


@app.command("run")
def run_command(
    directory: Optional[Path] = typer.Option(
        None,
        "--dir",
        "-d",
        exists=True,
        file_okay=False,
        resolve_path=True,
        help="Directory containing the .xcodeproj/.xcworkspace (default: current directory).",
    ),
    scheme: Optional[str] = typer.Option(None, "--scheme", "-s", help="Scheme to build (skips the prompt)."),
    device: Optional[str] = typer.Option(None, "--device", help="Device name to target (skips the prompt)."),
    scheme_policy: Optional[SchemePolicy] = typer.Option(
        None,
        "--scheme-policy",
        case_sensitive=False,
        help="Prompt for a scheme or take the first one listed.",
    ),
    lister: Optional[DeviceListerKind] = typer.Option(
        None,
        "--lister",
        case_sensitive=False,
        help="Device listing strategy: xctrace (text) or simctl (JSON).",
    ),
    configuration: Optional[str] = typer.Option(None, "--configuration", "-c", help="Build configuration."),
    start_stopped: Optional[bool] = typer.Option(
        None,
        "--start-stopped/--no-start-stopped",
        help="Launch on physical devices suspended, waiting for a debugger.",
    ),
    best_effort: Optional[bool] = typer.Option(
        None,
        "--best-effort/--stop-on-failure",
        help="Run every install/launch step even after one fails.",
    ),
    strict_ids: Optional[bool] = typer.Option(
        None,
        "--strict-ids/--lenient-ids",
        help="Only accept UUID-shaped identifiers from xctrace.",
    ),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    """Locate the project, pick scheme and device, build, install and launch."""

    settings = _settings_with(
        scheme_policy=scheme_policy,
        device_lister=lister,
        configuration=configuration,
        start_stopped=start_stopped,
        best_effort_deploy=best_effort,
        strict_device_ids=strict_ids,
    )
    if not no_banner:
        print_banner(_console)

    hooks = PipelineHooks(
        stage=_print_stage,
        info=lambda message: _console.print(Text(f"📂 {message}")),
    )
    result = run_workflow(
        settings=settings,
        request=RunRequest(directory=directory, scheme=scheme, device=device),
        runner=_build_runner(),
        chooser=_build_chooser(),
        hooks=hooks,
    )

    if result.deploy_report is not None:
        _console.print(build_deploy_table(result.deploy_report))
    if not result.ok:
        assert result.error is not None
        if result.stage is Stage.BUILD:
            _console.print("❌ Build failed!", style="bold red")
        _report_error(result.error, result.stage)
        raise typer.Exit(code=1)

    _console.print("\n✅ Done!", style="bold green")


@app.command()
def schemes(
    directory: Optional[Path] = typer.Option(None, "--dir", "-d", exists=True, file_okay=False, resolve_path=True),
) -> None:
    """List the schemes of the detected project."""

    settings = AppSettings()
    try:
        project = locate_project(directory)
        names = list_schemes(_build_runner(), settings, project)
    except XcodeRunnerError as exc:
        _report_error(exc)
        raise typer.Exit(code=1) from exc

    _console.print(Text(f"📂 {project.name}"))
    _console.print(build_schemes_table(names))


@app.command()
def devices(
    lister: Optional[DeviceListerKind] = typer.Option(None, "--lister", case_sensitive=False),
    strict_ids: Optional[bool] = typer.Option(None, "--strict-ids/--lenient-ids"),
) -> None:
    """List the devices a build can target."""

    settings = _settings_with(device_lister=lister, strict_device_ids=strict_ids)
    try:
        registry = list_devices(_build_runner(), settings)
    except XcodeRunnerError as exc:
        _report_error(exc)
        raise typer.Exit(code=1) from exc

    _console.print(build_devices_table(registry))


@app.command()
def inspect(
    directory: Optional[Path] = typer.Option(None, "--dir", "-d", exists=True, file_okay=False, resolve_path=True),
    scheme: Optional[str] = typer.Option(None, "--scheme", "-s"),
    device: Optional[str] = typer.Option(None, "--device"),
    scheme_policy: Optional[SchemePolicy] = typer.Option(None, "--scheme-policy", case_sensitive=False),
    lister: Optional[DeviceListerKind] = typer.Option(None, "--lister", case_sensitive=False),
    strict_ids: Optional[bool] = typer.Option(None, "--strict-ids/--lenient-ids"),
) -> None:
    """Resolve app path, bundle identifier and target kind without building."""

    settings = _settings_with(scheme_policy=scheme_policy, device_lister=lister, strict_device_ids=strict_ids)
    request = RunRequest(directory=directory, scheme=scheme, device=device)
    runner = _build_runner()
    chooser = _build_chooser()
    try:
        project = locate_project(request.directory)
        schemes = list_schemes(runner, settings, project)
        scheme_name = scheme_chooser(settings, request, chooser).choose("Select a Scheme", schemes)
        registry = list_devices(runner, settings)
        device_chooser = PresetChooser(request.device) if request.device else chooser
        device_name = device_chooser.choose("Select a Device", list(registry))
        if device_name not in registry:
            raise DeviceNotFound(f"Could not find an identifier for {device_name!r}")
        target = resolve_target(
            runner,
            settings,
            project,
            scheme=scheme_name,
            device_name=device_name,
            device_id=registry[device_name],
        )
    except XcodeRunnerError as exc:
        _report_error(exc)
        raise typer.Exit(code=1) from exc

    _console.print(build_target_panel(target))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
