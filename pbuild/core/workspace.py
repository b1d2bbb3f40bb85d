"""Workspace detection and paths.

The workspace is the repository being built. It is identified by a
``pbuild.toml`` file at its root; all output locations are derived from it
and the ``[paths]`` table of that file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .config import Config
from .result import Err, Ok, Result

__all__ = [
    "MARKER_FILE",
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
    "find_workspace_upward",
    "is_workspace_root",
]

MARKER_FILE = "pbuild.toml"


@dataclass(frozen=True, slots=True)
class WorkspaceError:
    """Error when workspace cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A detected build workspace and its well-known locations."""

    root: Path
    config: Config = field(default_factory=Config)

    @property
    def config_path(self) -> Path:
        return self.root / MARKER_FILE

    @property
    def changelog_path(self) -> Path:
        return self.root / self.config.project.changelog

    @property
    def solution_path(self) -> Path | None:
        """Explicit solution file, or None to let the toolchain pick one."""
        if self.config.project.solution is None:
            return None
        return self.root / self.config.project.solution

    @property
    def source_dir(self) -> Path:
        return self.root / self.config.paths.source

    @property
    def output_dir(self) -> Path:
        return self.root / self.config.paths.output

    @property
    def packages_dir(self) -> Path:
        """Where produced packages are written (``bin/nuget`` by default)."""
        return self.output_dir / "nuget"

    @property
    def test_results_dir(self) -> Path:
        return self.root / self.config.paths.tests

    @property
    def perf_results_dir(self) -> Path:
        return self.root / self.config.paths.perf_tests

    @property
    def docs_site_dir(self) -> Path:
        return self.root / self.config.paths.docs_site

    @property
    def docfx_config_path(self) -> Path:
        return self.root / self.config.docs.docfx

    def with_config(self, config: Config) -> Workspace:
        return Workspace(root=self.root, config=config)

    def __str__(self) -> str:
        return str(self.root)


def is_workspace_root(path: Path) -> bool:
    return (path / MARKER_FILE).is_file()


def find_workspace_upward(start: Path) -> Path | None:
    """Search upward from start directory for a workspace root."""
    for parent in (start, *start.parents):
        if is_workspace_root(parent):
            return parent
    return None


def detect_workspace(
    *,
    start_dir: Path | None = None,
    env_var: str = "WORKSPACE_ROOT",
) -> Result[Workspace, WorkspaceError]:
    """Detect the workspace root directory.

    Detection order:
    1. ``WORKSPACE_ROOT`` environment variable (if set and valid)
    2. Search upward from start_dir (or cwd) for ``pbuild.toml``

    The returned workspace carries default config; callers load
    ``pbuild.toml`` and attach it with ``with_config``.
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if is_workspace_root(env_path):
            return Ok(Workspace(root=env_path))
        return Err(
            WorkspaceError(
                message=f"{env_var}={env_value} is not a workspace (missing {MARKER_FILE})",
                searched_from=env_path,
            )
        )

    start = (start_dir or Path.cwd()).resolve()
    found = find_workspace_upward(start)
    if found is None:
        return Err(
            WorkspaceError(
                message=f"No {MARKER_FILE} found in {start} or any parent directory",
                searched_from=start,
            )
        )
    return Ok(Workspace(root=found))
