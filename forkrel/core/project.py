"""Project root detection and paths.

The project is the git checkout of the fork being released. Its root holds
``.git`` plus either ``forkrel.toml`` or the default ``package.json`` manifest.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CONFIG_FILE_NAME, DEFAULT_MANIFEST
from .result import Err, Ok, Result

__all__ = [
    "Project",
    "ProjectError",
    "ProjectSource",
    "PROJECT_ROOT_ENV",
    "detect_project",
    "find_project_upward",
    "is_project_root",
]

PROJECT_ROOT_ENV = "FORKREL_PROJECT_ROOT"

ProjectSource = Literal["flag", "env", "cwd"]


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected project checkout."""

    root: Path
    source: ProjectSource = "cwd"

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    def manifest_path(self, manifest: str) -> Path:
        return self.root / manifest

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    if not (path / ".git").exists():
        return False
    return (path / CONFIG_FILE_NAME).is_file() or (path / DEFAULT_MANIFEST).is_file()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start for a project root."""
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def detect_project(
    *,
    explicit: Path | None = None,
    start_dir: Path | None = None,
    env_var: str = PROJECT_ROOT_ENV,
) -> Result[Project, ProjectError]:
    """Detect the project root.

    Detection order:
    1. ``explicit`` (the ``--project`` flag)
    2. the environment variable named by ``env_var``
    3. search upward from ``start_dir`` (or cwd)
    """
    if explicit is not None:
        root = explicit.expanduser().resolve()
        if not is_project_root(root):
            return Err(
                ProjectError(
                    f"not a project root (needs .git and {DEFAULT_MANIFEST} or "
                    f"{CONFIG_FILE_NAME}): {root}",
                    searched_from=root,
                )
            )
        return Ok(Project(root=root, source="flag"))

    env_value = os.environ.get(env_var)
    if env_value:
        root = Path(env_value).expanduser().resolve()
        if is_project_root(root):
            return Ok(Project(root=root, source="env"))
        return Err(ProjectError(f"{env_var} is not a project root: {root}", searched_from=root))

    start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(start)
    if found is None:
        return Err(
            ProjectError(
                "no project found (looked for .git with package.json or forkrel.toml)",
                searched_from=start,
            )
        )
    return Ok(Project(root=found, source="cwd"))
