"""Detección del descriptor de proyecto Xcode.

Busca en un directorio (por defecto el CWD) un `.xcworkspace` o un
`.xcodeproj`. Si existen ambos gana el workspace, que es lo que Xcode abre
cuando hay CocoaPods/SPM multi-proyecto.
"""

from __future__ import annotations

import logging
from pathlib import Path

from core.domain.models import ProjectDescriptor, ProjectKind
from core.errors import ProjectNotFound

WORKSPACE_SUFFIX = ".xcworkspace"
PROJECT_SUFFIX = ".xcodeproj"

logger = logging.getLogger(__name__)


def locate_project(directory: Path | None = None) -> ProjectDescriptor:
    root = directory or Path.cwd()

    workspace: Path | None = None
    project: Path | None = None
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        if entry.suffix == WORKSPACE_SUFFIX and workspace is None:
            workspace = entry
        elif entry.suffix == PROJECT_SUFFIX and project is None:
            project = entry

    if workspace is not None:
        logger.debug("Using workspace %s (project: %s)", workspace.name, project.name if project else "-")
        return ProjectDescriptor(name=workspace.name, path=workspace, kind=ProjectKind.WORKSPACE)
    if project is not None:
        logger.debug("Using project %s", project.name)
        return ProjectDescriptor(name=project.name, path=project, kind=ProjectKind.PROJECT)

    raise ProjectNotFound(f"No {PROJECT_SUFFIX} or {WORKSPACE_SUFFIX} found in {root}")
