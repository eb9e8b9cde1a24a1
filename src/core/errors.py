"""Error taxonomy shared by the core and the adapters.

Every failure that should stop the workflow derives from `XcodeRunnerError`,
so the orchestrator and the CLI can report it with a single `except`.
"""

from __future__ import annotations

from typing import Sequence

from core.domain.models import StepResult


class XcodeRunnerError(Exception):
    """Base class for expected, user-reportable failures."""


class ProjectNotFound(XcodeRunnerError):
    pass


class ToolchainInvocationFailed(XcodeRunnerError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, argv: Sequence[str], returncode: int | None, output: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.output = output
        command = " ".join(self.argv)
        if returncode is None:
            message = f"could not start command: {command}"
        else:
            message = f"command failed with exit code {returncode}: {command}"
        if output.strip():
            message = f"{message}\n{output.rstrip()}"
        super().__init__(message)


class ParseFailed(XcodeRunnerError):
    pass


class NoSchemesFound(XcodeRunnerError):
    pass


class NoDevicesFound(XcodeRunnerError):
    pass


class SelectionAborted(XcodeRunnerError):
    pass


class DeviceNotFound(XcodeRunnerError):
    pass


class BuildFailed(XcodeRunnerError):
    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"Build failed (exit code {returncode})")


class MissingBuildSetting(XcodeRunnerError):
    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__("Missing or invalid build setting(s): " + ", ".join(self.fields))


class DeployStepFailed(XcodeRunnerError):
    def __init__(self, step: StepResult) -> None:
        self.step = step
        super().__init__(f"{step.name} failed (exit code {step.returncode})")
