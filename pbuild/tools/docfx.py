"""DocFX adapter for API metadata and documentation site builds."""

from __future__ import annotations

from pathlib import Path

from pbuild.core.result import Result
from pbuild.platform.process import ProcessError
from pbuild.tools.base import CommandRunner

__all__ = ["DocFx"]

_DOCS_TIMEOUT_SECONDS = 30 * 60.0


class DocFx:
    def __init__(self, runner: CommandRunner, *, executable: str = "docfx") -> None:
        self._runner = runner
        self._exe = executable

    def metadata(self, config: Path) -> Result[None, ProcessError]:
        return self._runner.run([self._exe, "metadata", str(config)])

    def build(self, config: Path) -> Result[None, ProcessError]:
        return self._runner.run(
            [self._exe, "build", str(config)],
            cwd=config.parent,
            timeout=_DOCS_TIMEOUT_SECONDS,
        )

    def serve(self, config: Path) -> Result[None, ProcessError]:
        # Blocks until the user stops the server.
        return self._runner.run([self._exe, str(config), "--serve"], cwd=config.parent)
