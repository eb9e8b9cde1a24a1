"""Logging for the CLI (stdlib `logging` rendered by Rich)."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", *, verbose: bool = False) -> None:
    """Install a single RichHandler on stderr; idempotent across commands."""

    effective = "DEBUG" if verbose else level.upper()
    logging.basicConfig(
        level=effective,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
                markup=False,
            )
        ],
        force=True,
    )
