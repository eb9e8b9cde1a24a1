"""Implementaciones de `Chooser`.

- `RichChooser`: lista numerada con Rich y `IntPrompt` (interactivo).
- `FirstChoiceChooser`: política "first-match", sin prompt.
- `PresetChooser`: valor fijado desde un flag de la CLI.
"""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.prompt import IntPrompt
from rich.text import Text

from core.errors import SelectionAborted
from core.interfaces.chooser import Chooser


def _require_choices(label: str, choices: Sequence[str]) -> None:
    if not choices:
        raise SelectionAborted(f"{label}: nothing to choose from")


class RichChooser(Chooser):
    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def choose(self, label: str, choices: Sequence[str]) -> str:
        _require_choices(label, choices)

        self._console.print(Text(label, style="bold cyan"))
        for index, choice in enumerate(choices, start=1):
            self._console.print(Text.assemble((f"  {index:>2}", "bright_green"), "  ", choice))

        try:
            picked = IntPrompt.ask(
                "Choice",
                console=self._console,
                choices=[str(i) for i in range(1, len(choices) + 1)],
                show_choices=False,
                default=1,
            )
        except (KeyboardInterrupt, EOFError) as exc:
            raise SelectionAborted(f"{label}: selection aborted") from exc
        return choices[picked - 1]


class FirstChoiceChooser(Chooser):
    def choose(self, label: str, choices: Sequence[str]) -> str:
        _require_choices(label, choices)
        return choices[0]


class PresetChooser(Chooser):
    def __init__(self, value: str) -> None:
        self._value = value

    def choose(self, label: str, choices: Sequence[str]) -> str:
        _require_choices(label, choices)
        if self._value not in choices:
            available = ", ".join(choices)
            raise SelectionAborted(f"{label}: {self._value!r} is not one of: {available}")
        return self._value
