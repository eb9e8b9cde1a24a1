"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Los adaptadores (xcodebuild/xcrun) leen los binarios y flags de un único sitio.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeviceListerKind(str, Enum):
    """Which device-enumeration command feeds the device registry."""

    XCTRACE = "xctrace"
    SIMCTL = "simctl"


class SchemePolicy(str, Enum):
    """How a scheme is picked when none is given explicitly."""

    INTERACTIVE = "interactive"
    FIRST = "first"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "xcode-runner"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "xcode-runner"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "xcode-runner"
    return Path.home() / ".config" / "xcode-runner"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Se lee de variables `XCODE_RUNNER_*` y de un `.env` (proyecto primero,
    luego el global del usuario). Los flags de la CLI la sobreescriben por
    ejecución con `model_copy(update=...)`.
    """

    model_config = SettingsConfigDict(
        env_prefix="XCODE_RUNNER_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    configuration: str = Field(
        default="Debug",
        min_length=1,
        description="Build configuration passed to `xcodebuild -configuration`.",
    )
    xcodebuild_bin: str = Field(
        default="xcodebuild",
        min_length=1,
        description="Executable used for scheme listing, build settings and builds.",
    )
    xcrun_bin: str = Field(
        default="xcrun",
        min_length=1,
        description="Executable used for simctl, xctrace and devicectl.",
    )

    device_lister: DeviceListerKind = Field(
        default=DeviceListerKind.XCTRACE,
        description="Device listing strategy: `xctrace` (text) or `simctl` (JSON).",
    )
    scheme_policy: SchemePolicy = Field(
        default=SchemePolicy.INTERACTIVE,
        description="Prompt for a scheme, or take the first one listed.",
    )
    strict_device_ids: bool = Field(
        default=False,
        description="Only accept UUID-shaped identifiers from the xctrace listing.",
    )

    simulator_marker: str = Field(
        default="simulator",
        min_length=1,
        description="Substring of the artifact path that marks a simulator build.",
    )
    start_stopped: bool = Field(
        default=True,
        description="Launch on physical devices with `--start-stopped`.",
    )
    best_effort_deploy: bool = Field(
        default=False,
        description="Keep running install/launch steps after one of them fails.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level (DEBUG, INFO, WARNING, ERROR).",
    )
