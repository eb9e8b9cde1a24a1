"""Ejecución de comandos externos (subprocess).

Por qué un wrapper:
- Estandariza captura de salida, logging y errores para xcodebuild/xcrun.
- Facilita testeo: el Core recibe un `CommandRunner` y los tests pasan uno falso.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from core.errors import ToolchainInvocationFailed
from core.interfaces.toolchain import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

# Exit status reported for executables that cannot be started (same as the shell).
COMMAND_NOT_FOUND = 127


class SubprocessRunner(CommandRunner):
    """Blocking `subprocess` implementation of `CommandRunner`."""

    def __init__(self, *, cwd: str | None = None) -> None:
        self._cwd = cwd

    def run(
        self,
        argv: Sequence[str],
        *,
        merge_stderr: bool = True,
        check: bool = True,
    ) -> CommandResult:
        args = list(argv)
        logger.debug("Running: %s", " ".join(args))
        try:
            completed = subprocess.run(
                args,
                cwd=self._cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            if check:
                raise ToolchainInvocationFailed(args, None, str(exc)) from exc
            return CommandResult(argv=args, returncode=COMMAND_NOT_FOUND, stdout="", stderr=str(exc))

        result = CommandResult(
            argv=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        logger.debug("Exit code %s: %s", result.returncode, args[0])
        if check and not result.ok:
            raise ToolchainInvocationFailed(args, result.returncode, result.output)
        return result

    def stream(self, argv: Sequence[str]) -> int:
        args = list(argv)
        logger.debug("Streaming: %s", " ".join(args))
        try:
            completed = subprocess.run(args, cwd=self._cwd)
        except OSError as exc:
            raise ToolchainInvocationFailed(args, None, str(exc)) from exc
        logger.debug("Exit code %s: %s", completed.returncode, args[0])
        return completed.returncode
