"""Contrato del selector interactivo.

La selección (esquema, dispositivo) se inyecta como capacidad explícita para
poder cambiar el prompt de terminal por una implementación guionizada.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class Chooser(Protocol):
    def choose(self, label: str, choices: Sequence[str]) -> str:
        """Devuelve uno de `choices`; lanza `SelectionAborted` si se cancela."""

        ...
