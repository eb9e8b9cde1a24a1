"""Shared fixtures: a scripted command runner, a scripted chooser and sample outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from core.config import AppSettings
from core.errors import SelectionAborted, ToolchainInvocationFailed
from core.interfaces.toolchain import CommandResult


XCODEBUILD_LIST = """\
Command line invocation:
    /Applications/Xcode.app/Contents/Developer/usr/bin/xcodebuild -list

Information about project "App":
    Targets:
        App
        AppTests

    Build Configurations:
        Debug
        Release

    If no build configuration is specified and -scheme is not passed then "Release" is used.

    Schemes:
        App
        App Staging
"""

XCTRACE_DEVICES = """\
== Devices ==
Jane's MacBook Pro (4C4C4544-0042-3110-8051-B7C04F4E3732)
Jane's iPhone (17.2) (00008110-001A2B3C4D5E801E)

== Devices Offline ==
Old iPad (16.7) (00008020-000A1B2C3D4E5F60)

== Simulators ==
iPad Pro (12.9-inch) (6th generation) Simulator (17.2) (9D6B1E3C-2F4A-4B5C-8D7E-1A2B3C4D5E6F)
iPhone 15 Simulator (17.2) (A1B2C3D4-E5F6-4789-ABCD-EF0123456789)
"""

SIMCTL_DEVICES = """\
{
  "devices": {
    "com.apple.CoreSimulator.SimRuntime.iOS-17-2": [
      {"name": "iPhone 15", "udid": "ABCD-1234", "isAvailable": true, "state": "Shutdown"},
      {"name": "iPhone 14", "udid": "EEEE-0000", "isAvailable": false, "state": "Shutdown"}
    ]
  }
}
"""

SIMULATOR_BUILD_SETTINGS = """\
[
  {
    "action": "build",
    "target": "App",
    "buildSettings": {
      "BUILT_PRODUCTS_DIR": "/tmp/DerivedData/App/Build/Products/Debug-iphonesimulator",
      "CONTENTS_FOLDER_PATH": "App.app",
      "PRODUCT_BUNDLE_IDENTIFIER": "com.example.App"
    }
  }
]
"""

DEVICE_BUILD_SETTINGS = SIMULATOR_BUILD_SETTINGS.replace("Debug-iphonesimulator", "Debug-iphoneos")


class FakeRunner:
    """`CommandRunner` that answers from scripted rules and records every call.

    A rule matches when all of its tokens appear in argv; later rules win.
    Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.streamed: list[list[str]] = []
        self.stream_returncode = 0
        self._rules: list[tuple[tuple[str, ...], int, str, str]] = []

    def on(self, *tokens: str, stdout: str = "", returncode: int = 0, stderr: str = "") -> "FakeRunner":
        self._rules.append((tokens, returncode, stdout, stderr))
        return self

    def _match(self, argv: list[str]) -> tuple[int, str, str]:
        for tokens, returncode, stdout, stderr in reversed(self._rules):
            if all(token in argv for token in tokens):
                return returncode, stdout, stderr
        return 0, "", ""

    def run(self, argv: Sequence[str], *, merge_stderr: bool = True, check: bool = True) -> CommandResult:
        args = list(argv)
        self.calls.append(args)
        returncode, stdout, stderr = self._match(args)
        if merge_stderr:
            stdout, stderr = stdout + stderr, ""
        result = CommandResult(argv=args, returncode=returncode, stdout=stdout, stderr=stderr)
        if check and returncode != 0:
            raise ToolchainInvocationFailed(args, returncode, result.output)
        return result

    def stream(self, argv: Sequence[str]) -> int:
        self.streamed.append(list(argv))
        return self.stream_returncode

    def calls_with(self, token: str) -> list[list[str]]:
        return [call for call in self.calls if token in call]


class ScriptedChooser:
    """`Chooser` that replays answers; a None answer aborts the selection."""

    def __init__(self, *answers: str | None) -> None:
        self.answers = list(answers)
        self.prompts: list[tuple[str, list[str]]] = []

    def choose(self, label: str, choices: Sequence[str]) -> str:
        self.prompts.append((label, list(choices)))
        answer = self.answers.pop(0)
        if answer is None:
            raise SelectionAborted(f"{label}: selection aborted")
        return answer


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None)


@pytest.fixture
def runner() -> FakeRunner:
    return (
        FakeRunner()
        .on("-list", stdout=XCODEBUILD_LIST)
        .on("xctrace", stdout=XCTRACE_DEVICES)
        .on("simctl", "list", stdout=SIMCTL_DEVICES)
        .on("-showBuildSettings", stdout=SIMULATOR_BUILD_SETTINGS)
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    (tmp_path / "App.xcodeproj").mkdir()
    return tmp_path
