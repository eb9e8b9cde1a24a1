"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Los registros de `simctl` y de `-showBuildSettings` se validan por alias
  sin escribir lookups a mano.
- Todos los modelos son efímeros: se reconstruyen en cada ejecución.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ProjectKind(str, Enum):
    WORKSPACE = "workspace"
    PROJECT = "project"


class TargetKind(str, Enum):
    SIMULATOR = "simulator"
    DEVICE = "device"


class ProjectDescriptor(BaseModel):
    """Workspace o proyecto detectado en el directorio de trabajo."""

    name: str = Field(..., min_length=1, description="Nombre del directorio (p.ej. 'App.xcodeproj').")
    path: Path = Field(..., description="Ruta completa al descriptor.")
    kind: ProjectKind

    def xcodebuild_args(self) -> list[str]:
        """Flags que seleccionan este descriptor en `xcodebuild`."""

        flag = "-workspace" if self.kind is ProjectKind.WORKSPACE else "-project"
        return [flag, str(self.path)]


class Device(BaseModel):
    """Un simulador o dispositivo físico tal como lo lista la toolchain."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(..., description="Nombre visible del dispositivo.")
    udid: str = Field(..., description="Identificador único (destination id).")
    is_available: bool = Field(
        default=False,
        alias="isAvailable",
        description="Solo los dispositivos disponibles entran en el registro.",
    )


class BuildSettings(BaseModel):
    """Los tres campos de `-showBuildSettings` que consume el flujo."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    built_products_dir: str = Field(..., alias="BUILT_PRODUCTS_DIR")
    contents_folder_path: str = Field(..., alias="CONTENTS_FOLDER_PATH")
    bundle_identifier: str = Field(..., alias="PRODUCT_BUNDLE_IDENTIFIER")

    @property
    def app_path(self) -> str:
        return f"{self.built_products_dir}/{self.contents_folder_path}"


class BuildTarget(BaseModel):
    """Everything the build and deploy stages need, resolved up front."""

    scheme: str
    device_name: str
    device_id: str
    app_path: str
    bundle_identifier: str
    kind: TargetKind


class StepResult(BaseModel):
    """Outcome of one external install/launch invocation."""

    name: str
    argv: list[str] = Field(default_factory=list)
    returncode: int | None = Field(
        default=None,
        description="None when the step was skipped after an earlier failure.",
    )
    output: str = ""

    @property
    def skipped(self) -> bool:
        return self.returncode is None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DeployReport(BaseModel):
    """Aggregated result of the deploy sequence."""

    kind: TargetKind
    steps: list[StepResult] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(step.ok for step in self.steps)

    @property
    def first_failure(self) -> StepResult | None:
        for step in self.steps:
            if not step.skipped and not step.ok:
                return step
        return None
