"""Lanzador para desarrollo: `python -m main run` desde la raíz del repo.

Sin `pip install -e .` los paquetes de `src/` no están en el path; este
módulo los añade y delega en la app Typer de `cli.main`.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import app  # noqa: PLC0415

    app(prog_name="xcode-runner")


if __name__ == "__main__":
    main()
