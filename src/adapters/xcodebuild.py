"""Adaptador para `xcodebuild`.

Responsabilidad:
- Construir los argv de `-list`, `-showBuildSettings -json` y `build`.
- Devolver la salida cruda; el parseo vive en `adapters.parsers`.
"""

from __future__ import annotations

import logging

from core.config import AppSettings
from core.domain.models import ProjectDescriptor
from core.errors import BuildFailed
from core.interfaces.toolchain import CommandRunner

logger = logging.getLogger(__name__)


def destination_arg(device_id: str) -> str:
    return f"id={device_id}"


class Xcodebuild:
    """Thin command builder around the `xcodebuild` executable."""

    def __init__(
        self,
        runner: CommandRunner,
        settings: AppSettings | None = None,
        project: ProjectDescriptor | None = None,
    ) -> None:
        self._runner = runner
        self._settings = settings or AppSettings()
        self._project = project

    def _base(self) -> list[str]:
        argv = [self._settings.xcodebuild_bin]
        if self._project is not None:
            argv.extend(self._project.xcodebuild_args())
        return argv

    def version(self) -> str:
        result = self._runner.run([self._settings.xcodebuild_bin, "-version"])
        return result.stdout.strip()

    def list_schemes(self) -> str:
        return self._runner.run([*self._base(), "-list"]).stdout

    def show_build_settings(self, scheme: str, device_id: str) -> str:
        argv = [
            *self._base(),
            "-scheme",
            scheme,
            "-destination",
            destination_arg(device_id),
            "-showBuildSettings",
            "-json",
        ]
        # stdout only: xcodebuild prints warnings on stderr that would break the JSON.
        return self._runner.run(argv, merge_stderr=False).stdout

    def build(self, scheme: str, device_id: str) -> None:
        argv = [
            *self._base(),
            "-scheme",
            scheme,
            "-destination",
            destination_arg(device_id),
            "-configuration",
            self._settings.configuration,
            "build",
        ]
        logger.info("Building %s (%s) for %s", scheme, self._settings.configuration, device_id)
        returncode = self._runner.stream(argv)
        if returncode != 0:
            raise BuildFailed(returncode)
