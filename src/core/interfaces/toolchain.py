"""Contratos de la toolchain externa.

Por qué Protocol:
- El Core depende de "algo que ejecuta comandos" y "algo que lista
  dispositivos", no de `subprocess` ni de un formato de salida concreto.
- Los tests sustituyen el runner por uno que devuelve salidas guionizadas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import BuildTarget, DeployReport


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one external command."""

    argv: list[str]
    returncode: int
    stdout: str
    stderr: str = ""

    @property
    def output(self) -> str:
        """stdout and stderr together, for error reporting."""

        if self.stderr and self.stdout:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        merge_stderr: bool = True,
        check: bool = True,
    ) -> CommandResult:
        """Run `argv` to completion and capture its output.

        With `check=True` a non-zero exit raises `ToolchainInvocationFailed`.
        """

        ...

    def stream(self, argv: Sequence[str]) -> int:
        """Run `argv` with output passed through to the terminal; return the exit code."""

        ...


@runtime_checkable
class DeviceLister(Protocol):
    """One strategy for building the device registry (name -> identifier)."""

    def list_devices(self) -> dict[str, str]:
        ...


@runtime_checkable
class Deployer(Protocol):
    """Installs and launches a built artifact on one kind of target."""

    def deploy(self, target: BuildTarget) -> DeployReport:
        ...
