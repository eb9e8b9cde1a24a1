"""Build & deploy orchestration.

The workflow is a strictly forward sequence of stages:

    locate project -> list schemes -> select scheme -> list devices ->
    select device -> query build settings -> build -> deploy -> done

Any `XcodeRunnerError` moves it to `failed` and stops; nothing is retried or
rolled back. Side-effects for the UI (printing, spinners) are delegated to
`PipelineHooks` so the CLI, tests and future entry-points share this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from adapters.choosers import FirstChoiceChooser, PresetChooser
from adapters.deployers import build_deployer
from adapters.device_listers import build_device_lister
from adapters.parsers import parse_build_settings, parse_schemes
from adapters.xcodebuild import Xcodebuild
from core.config import AppSettings, SchemePolicy
from core.domain.models import BuildTarget, DeployReport, ProjectDescriptor, TargetKind
from core.errors import DeployStepFailed, DeviceNotFound, MissingBuildSetting, XcodeRunnerError
from core.interfaces.chooser import Chooser
from core.interfaces.toolchain import CommandRunner
from core.project_locator import locate_project

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    IDLE = "idle"
    LOCATE_PROJECT = "locate_project"
    LIST_SCHEMES = "list_schemes"
    SELECT_SCHEME = "select_scheme"
    LIST_DEVICES = "list_devices"
    SELECT_DEVICE = "select_device"
    QUERY_BUILD_SETTINGS = "query_build_settings"
    BUILD = "build"
    DEPLOY = "deploy"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunRequest:
    """Per-run selections; anything left as None is resolved interactively."""

    directory: Path | None = None
    scheme: str | None = None
    device: str | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, notices)."""

    stage: Callable[[Stage, str], None] | None = None
    info: Callable[[str], None] | None = None


@dataclass
class RunResult:
    state: Stage = Stage.IDLE
    stage: Stage = Stage.IDLE
    error: XcodeRunnerError | None = None
    project: ProjectDescriptor | None = None
    schemes: list[str] = field(default_factory=list)
    devices: dict[str, str] = field(default_factory=dict)
    target: BuildTarget | None = None
    deploy_report: DeployReport | None = None

    @property
    def ok(self) -> bool:
        return self.state is Stage.DONE


def target_kind_for(app_path: str, marker: str = "simulator") -> TargetKind:
    """Simulator builds land in `*-iphonesimulator` product directories."""

    return TargetKind.SIMULATOR if marker in app_path else TargetKind.DEVICE


def scheme_chooser(settings: AppSettings, request: RunRequest, chooser: Chooser) -> Chooser:
    if request.scheme:
        return PresetChooser(request.scheme)
    if settings.scheme_policy is SchemePolicy.FIRST:
        return FirstChoiceChooser()
    return chooser


def list_schemes(runner: CommandRunner, settings: AppSettings, project: ProjectDescriptor) -> list[str]:
    raw = Xcodebuild(runner, settings, project).list_schemes()
    return parse_schemes(raw)


def list_devices(runner: CommandRunner, settings: AppSettings) -> dict[str, str]:
    return build_device_lister(settings.device_lister, runner, settings).list_devices()


def resolve_target(
    runner: CommandRunner,
    settings: AppSettings,
    project: ProjectDescriptor,
    *,
    scheme: str,
    device_name: str,
    device_id: str,
) -> BuildTarget:
    raw = Xcodebuild(runner, settings, project).show_build_settings(scheme, device_id)
    build_settings = parse_build_settings(raw)

    missing = [
        alias
        for alias, value in (
            ("BUILT_PRODUCTS_DIR", build_settings.built_products_dir),
            ("CONTENTS_FOLDER_PATH", build_settings.contents_folder_path),
            ("PRODUCT_BUNDLE_IDENTIFIER", build_settings.bundle_identifier),
        )
        if not value.strip()
    ]
    if missing:
        raise MissingBuildSetting(missing)

    app_path = build_settings.app_path
    return BuildTarget(
        scheme=scheme,
        device_name=device_name,
        device_id=device_id,
        app_path=app_path,
        bundle_identifier=build_settings.bundle_identifier,
        kind=target_kind_for(app_path, settings.simulator_marker),
    )


def run_workflow(
    *,
    settings: AppSettings,
    request: RunRequest,
    runner: CommandRunner,
    chooser: Chooser,
    hooks: PipelineHooks | None = None,
) -> RunResult:
    hooks = hooks or PipelineHooks()
    result = RunResult()

    def enter(stage: Stage, detail: str = "") -> None:
        result.stage = stage
        logger.debug("Stage %s %s", stage.value, detail)
        if hooks.stage:
            hooks.stage(stage, detail)

    try:
        enter(Stage.LOCATE_PROJECT)
        project = locate_project(request.directory)
        result.project = project
        if hooks.info:
            hooks.info(f"Detected Xcode {project.kind.value}: {project.name}")

        enter(Stage.LIST_SCHEMES, project.name)
        result.schemes = list_schemes(runner, settings, project)

        enter(Stage.SELECT_SCHEME)
        scheme = scheme_chooser(settings, request, chooser).choose("Select a Scheme", result.schemes)

        enter(Stage.LIST_DEVICES, settings.device_lister.value)
        result.devices = list_devices(runner, settings)

        enter(Stage.SELECT_DEVICE)
        device_chooser = PresetChooser(request.device) if request.device else chooser
        device_name = device_chooser.choose("Select a Device", list(result.devices))
        device_id = result.devices.get(device_name)
        if device_id is None:
            raise DeviceNotFound(f"Could not find an identifier for {device_name!r}")

        enter(Stage.QUERY_BUILD_SETTINGS, f"{scheme} @ {device_id}")
        target = resolve_target(
            runner,
            settings,
            project,
            scheme=scheme,
            device_name=device_name,
            device_id=device_id,
        )
        result.target = target

        enter(Stage.BUILD, f"{scheme} for {device_name} ({device_id})")
        Xcodebuild(runner, settings, project).build(scheme, device_id)

        enter(Stage.DEPLOY, target.kind.value)
        report = build_deployer(target.kind, runner, settings).deploy(target)
        result.deploy_report = report
        failure = report.first_failure
        if failure is not None:
            raise DeployStepFailed(failure)
    except XcodeRunnerError as exc:
        logger.debug("Workflow failed at %s: %s", result.stage.value, exc)
        result.state = Stage.FAILED
        result.error = exc
        return result

    enter(Stage.DONE)
    result.state = Stage.DONE
    return result
