"""Install & launch on simulators (`simctl`) and physical devices (`devicectl`).

Each deploy is an explicit list of fallible steps. By default the sequence
stops at the first failure and the remaining steps are recorded as skipped;
with `best_effort` every step runs and every failure is recorded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.config import AppSettings
from core.domain.models import BuildTarget, DeployReport, StepResult, TargetKind
from core.interfaces.toolchain import CommandRunner, Deployer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployStep:
    name: str
    argv: list[str]


def run_steps(
    runner: CommandRunner,
    kind: TargetKind,
    steps: list[DeployStep],
    *,
    best_effort: bool = False,
) -> DeployReport:
    report = DeployReport(kind=kind)
    failed = False
    for step in steps:
        if failed and not best_effort:
            report.steps.append(StepResult(name=step.name, argv=step.argv))
            continue
        result = runner.run(step.argv, check=False)
        report.steps.append(
            StepResult(
                name=step.name,
                argv=step.argv,
                returncode=result.returncode,
                output=result.output,
            )
        )
        if not result.ok:
            logger.warning("%s failed with exit code %s", step.name, result.returncode)
            failed = True
    return report


class SimulatorDeployer(Deployer):
    """bootstatus -> install -> launch."""

    def __init__(self, runner: CommandRunner, settings: AppSettings | None = None) -> None:
        self._runner = runner
        self._settings = settings or AppSettings()

    def steps(self, target: BuildTarget) -> list[DeployStep]:
        simctl = [self._settings.xcrun_bin, "simctl"]
        return [
            DeployStep("Wait for boot", [*simctl, "bootstatus", target.device_id, "-b"]),
            DeployStep("Install app", [*simctl, "install", target.device_id, target.app_path]),
            DeployStep("Launch app", [*simctl, "launch", target.device_id, target.bundle_identifier]),
        ]

    def deploy(self, target: BuildTarget) -> DeployReport:
        return run_steps(
            self._runner,
            TargetKind.SIMULATOR,
            self.steps(target),
            best_effort=self._settings.best_effort_deploy,
        )


class PhysicalDeviceDeployer(Deployer):
    """devicectl install -> devicectl process launch."""

    def __init__(self, runner: CommandRunner, settings: AppSettings | None = None) -> None:
        self._runner = runner
        self._settings = settings or AppSettings()

    def steps(self, target: BuildTarget) -> list[DeployStep]:
        devicectl = [self._settings.xcrun_bin, "devicectl", "device"]
        launch = [*devicectl, "process", "launch", "--device", target.device_id]
        if self._settings.start_stopped:
            launch.append("--start-stopped")
        launch.append(target.bundle_identifier)
        return [
            DeployStep(
                "Install app",
                [*devicectl, "install", "app", "--device", target.device_id, "--bundle", target.app_path],
            ),
            DeployStep("Launch app", launch),
        ]

    def deploy(self, target: BuildTarget) -> DeployReport:
        return run_steps(
            self._runner,
            TargetKind.DEVICE,
            self.steps(target),
            best_effort=self._settings.best_effort_deploy,
        )


def build_deployer(kind: TargetKind, runner: CommandRunner, settings: AppSettings | None = None) -> Deployer:
    if kind is TargetKind.SIMULATOR:
        return SimulatorDeployer(runner, settings)
    return PhysicalDeviceDeployer(runner, settings)
