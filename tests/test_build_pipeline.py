from __future__ import annotations

import pytest

from core.config import DeviceListerKind, SchemePolicy
from core.domain.models import TargetKind
from core.errors import (
    BuildFailed,
    DeployStepFailed,
    MissingBuildSetting,
    NoDevicesFound,
    ProjectNotFound,
    SelectionAborted,
    ToolchainInvocationFailed,
)
from core.services.build_pipeline import (
    PipelineHooks,
    RunRequest,
    Stage,
    run_workflow,
    scheme_chooser,
    target_kind_for,
)

from conftest import DEVICE_BUILD_SETTINGS, ScriptedChooser

SIM_ID = "A1B2C3D4-E5F6-4789-ABCD-EF0123456789"
IPHONE_ID = "00008110-001A2B3C4D5E801E"


def _run(settings, runner, chooser, directory, **request):
    return run_workflow(
        settings=settings,
        request=RunRequest(directory=directory, **request),
        runner=runner,
        chooser=chooser,
    )


def test_full_simulator_run(settings, runner, project_dir):
    chooser = ScriptedChooser("App Staging", "iPhone 15 Simulator")
    stages: list[Stage] = []

    result = run_workflow(
        settings=settings,
        request=RunRequest(directory=project_dir),
        runner=runner,
        chooser=chooser,
        hooks=PipelineHooks(stage=lambda stage, _detail: stages.append(stage)),
    )

    assert result.ok, result.error
    assert result.state is Stage.DONE
    assert stages == [
        Stage.LOCATE_PROJECT,
        Stage.LIST_SCHEMES,
        Stage.SELECT_SCHEME,
        Stage.LIST_DEVICES,
        Stage.SELECT_DEVICE,
        Stage.QUERY_BUILD_SETTINGS,
        Stage.BUILD,
        Stage.DEPLOY,
        Stage.DONE,
    ]
    assert chooser.prompts[0] == ("Select a Scheme", ["App", "App Staging"])
    assert chooser.prompts[1][0] == "Select a Device"

    project_path = str(project_dir / "App.xcodeproj")
    assert runner.calls_with("-showBuildSettings") == [
        [
            "xcodebuild", "-project", project_path,
            "-scheme", "App Staging", "-destination", f"id={SIM_ID}",
            "-showBuildSettings", "-json",
        ]
    ]
    assert runner.streamed == [
        [
            "xcodebuild", "-project", project_path,
            "-scheme", "App Staging", "-destination", f"id={SIM_ID}",
            "-configuration", "Debug", "build",
        ]
    ]

    target = result.target
    assert target is not None
    assert target.kind is TargetKind.SIMULATOR
    assert target.app_path.endswith("Debug-iphonesimulator/App.app")
    assert [step.argv[2] for step in result.deploy_report.steps] == ["bootstatus", "install", "launch"]


def test_physical_device_run_uses_devicectl(settings, runner, project_dir):
    runner.on("-showBuildSettings", stdout=DEVICE_BUILD_SETTINGS)

    result = _run(settings, runner, ScriptedChooser("App", "Jane's iPhone"), project_dir)

    assert result.ok, result.error
    assert result.target.kind is TargetKind.DEVICE
    assert result.target.device_id == IPHONE_ID
    assert runner.calls_with("devicectl")[-1][-2:] == ["--start-stopped", "com.example.App"]
    assert runner.calls_with("simctl") == []


def test_first_scheme_policy_skips_scheme_prompt(settings, runner, project_dir):
    first = settings.model_copy(update={"scheme_policy": SchemePolicy.FIRST})
    chooser = ScriptedChooser("iPhone 15 Simulator")

    result = _run(first, runner, chooser, project_dir)

    assert result.ok, result.error
    assert result.target.scheme == "App"
    assert [label for label, _ in chooser.prompts] == ["Select a Device"]


def test_preset_scheme_and_device_never_prompt(settings, runner, project_dir):
    chooser = ScriptedChooser()

    result = _run(settings, runner, chooser, project_dir, scheme="App Staging", device="iPhone 15 Simulator")

    assert result.ok, result.error
    assert chooser.prompts == []


def test_unknown_preset_device_fails_selection(settings, runner, project_dir):
    result = _run(settings, runner, ScriptedChooser("App"), project_dir, device="Pixel 8")

    assert result.state is Stage.FAILED
    assert result.stage is Stage.SELECT_DEVICE
    assert isinstance(result.error, SelectionAborted)


def test_simctl_lister_is_used_when_configured(settings, runner, project_dir):
    simctl = settings.model_copy(update={"device_lister": DeviceListerKind.SIMCTL})

    result = _run(simctl, runner, ScriptedChooser("App", "iPhone 15"), project_dir)

    assert result.ok, result.error
    assert result.devices == {"iPhone 15": "ABCD-1234"}
    assert runner.calls_with("xctrace") == []


def test_missing_project_fails_before_any_command(settings, runner, tmp_path):
    result = _run(settings, runner, ScriptedChooser(), tmp_path)

    assert result.state is Stage.FAILED
    assert result.stage is Stage.LOCATE_PROJECT
    assert isinstance(result.error, ProjectNotFound)
    assert runner.calls == []


def test_scheme_listing_failure(settings, runner, project_dir):
    runner.on("-list", returncode=66, stdout="xcodebuild: error: 'App.xcodeproj' does not exist.")

    result = _run(settings, runner, ScriptedChooser(), project_dir)

    assert result.stage is Stage.LIST_SCHEMES
    assert isinstance(result.error, ToolchainInvocationFailed)
    assert "does not exist" in str(result.error)


def test_aborted_scheme_selection(settings, runner, project_dir):
    result = _run(settings, runner, ScriptedChooser(None), project_dir)

    assert result.stage is Stage.SELECT_SCHEME
    assert isinstance(result.error, SelectionAborted)
    assert runner.calls_with("xctrace") == []


def test_no_devices(settings, runner, project_dir):
    runner.on("xctrace", stdout="== Devices Offline ==\nOld iPad (16.7) (00008020-000A1B2C3D4E5F60)\n")

    result = _run(settings, runner, ScriptedChooser("App"), project_dir)

    assert result.stage is Stage.LIST_DEVICES
    assert isinstance(result.error, NoDevicesFound)


def test_blank_bundle_identifier_fails_before_build(settings, runner, project_dir):
    runner.on(
        "-showBuildSettings",
        stdout='[{"buildSettings": {"BUILT_PRODUCTS_DIR": "/p", "CONTENTS_FOLDER_PATH": "A.app", '
        '"PRODUCT_BUNDLE_IDENTIFIER": ""}}]',
    )

    result = _run(settings, runner, ScriptedChooser("App", "iPhone 15 Simulator"), project_dir)

    assert result.stage is Stage.QUERY_BUILD_SETTINGS
    assert isinstance(result.error, MissingBuildSetting)
    assert result.error.fields == ["PRODUCT_BUNDLE_IDENTIFIER"]
    assert runner.streamed == []


def test_build_failure_stops_before_deploy(settings, runner, project_dir):
    runner.stream_returncode = 65

    result = _run(settings, runner, ScriptedChooser("App", "iPhone 15 Simulator"), project_dir)

    assert result.stage is Stage.BUILD
    assert isinstance(result.error, BuildFailed)
    assert result.error.returncode == 65
    assert result.deploy_report is None
    assert runner.calls_with("simctl") == []


def test_deploy_failure_is_reported_with_partial_report(settings, runner, project_dir):
    runner.on("simctl", "install", returncode=1, stdout="Failed to install the app")

    result = _run(settings, runner, ScriptedChooser("App", "iPhone 15 Simulator"), project_dir)

    assert result.state is Stage.FAILED
    assert result.stage is Stage.DEPLOY
    assert isinstance(result.error, DeployStepFailed)
    assert result.error.step.name == "Install app"
    assert result.deploy_report.steps[-1].skipped


def test_workspace_is_passed_to_xcodebuild(settings, runner, project_dir):
    (project_dir / "App.xcworkspace").mkdir()

    result = _run(settings, runner, ScriptedChooser("App", "iPhone 15 Simulator"), project_dir)

    assert result.ok, result.error
    assert runner.calls_with("-list")[0][1:3] == ["-workspace", str(project_dir / "App.xcworkspace")]


@pytest.mark.parametrize(
    ("app_path", "kind"),
    [
        ("/DerivedData/Build/Products/Debug-iphonesimulator/App.app", TargetKind.SIMULATOR),
        ("/DerivedData/Build/Products/Debug-xrsimulator/App.app", TargetKind.SIMULATOR),
        ("/DerivedData/Build/Products/Debug-iphoneos/App.app", TargetKind.DEVICE),
    ],
)
def test_target_kind_from_artifact_path(app_path, kind):
    assert target_kind_for(app_path) is kind


def test_scheme_chooser_prefers_explicit_scheme(settings):
    injected = ScriptedChooser()
    first = settings.model_copy(update={"scheme_policy": SchemePolicy.FIRST})

    assert scheme_chooser(first, RunRequest(scheme="App"), injected).choose("x", ["Other", "App"]) == "App"
    assert scheme_chooser(first, RunRequest(), injected).choose("x", ["Other", "App"]) == "Other"
    assert scheme_chooser(settings, RunRequest(), injected) is injected
