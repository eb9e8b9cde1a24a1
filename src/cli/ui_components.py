"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `run`, `schemes`, `devices` e `inspect`.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BuildTarget, DeployReport


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (desactivable con `--no-banner`)."""

    title = Text("🚀 Xcode Runner", style="bold cyan")
    subtitle = Text("Build • Install • Launch", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_schemes_table(schemes: Sequence[str]) -> Table:
    table = Table(title="Schemes")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Scheme", style="cyan", no_wrap=True)
    for index, scheme in enumerate(schemes, start=1):
        table.add_row(str(index), Text(scheme))
    return table


def build_devices_table(devices: Mapping[str, str]) -> Table:
    table = Table(title="Devices")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Identifier", style="magenta")
    for name, udid in devices.items():
        table.add_row(Text(name), Text(udid))
    return table


def build_target_panel(target: BuildTarget) -> Panel:
    body = Text()
    body.append("Scheme: ", style="bold")
    body.append(f"{target.scheme}\n")
    body.append("Device: ", style="bold")
    body.append(f"{target.device_name} ({target.device_id})\n")
    body.append("Kind: ", style="bold")
    body.append(f"{target.kind.value}\n")
    body.append("App: ", style="bold")
    body.append(f"{target.app_path}\n")
    body.append("Bundle id: ", style="bold")
    body.append(target.bundle_identifier)
    return Panel(body, title=Text("Build target", style="bold yellow"), border_style="yellow")


def build_deploy_table(report: DeployReport) -> Table:
    table = Table(title=f"Deploy ({report.kind.value})")
    table.add_column("Step", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Details", style="dim")
    for step in report.steps:
        if step.skipped:
            status = "[yellow]SKIPPED[/yellow]"
        elif step.ok:
            status = "[green]OK[/green]"
        else:
            status = f"[red]FAIL ({step.returncode})[/red]"
        detail = step.output.strip().splitlines()[-1] if step.output.strip() else ""
        table.add_row(step.name, status, Text(detail))
    return table
