"""Git adapter for the commands the release targets need."""

from __future__ import annotations

from pathlib import Path

from pbuild.core.result import Err, Ok, Result
from pbuild.platform.process import ProcessError
from pbuild.tools.base import CommandRunner

__all__ = ["Git"]

_GIT_TIMEOUT_SECONDS = 30.0


class Git:
    def __init__(self, runner: CommandRunner, *, executable: str = "git") -> None:
        self._runner = runner
        self._exe = executable

    def add(self, path: Path) -> Result[None, ProcessError]:
        return self._runner.run([self._exe, "add", str(path)], timeout=_GIT_TIMEOUT_SECONDS)

    def commit(self, message: str, *, sign: bool = False) -> Result[None, ProcessError]:
        args = [self._exe, "commit"]
        if sign:
            args.append("-S")
        args += ["-m", message]
        return self._runner.run(args, timeout=_GIT_TIMEOUT_SECONDS)

    def tag(self, name: str, *, force: bool = True) -> Result[None, ProcessError]:
        args = [self._exe, "tag"]
        if force:
            args.append("-f")
        args.append(name)
        return self._runner.run(args, timeout=_GIT_TIMEOUT_SECONDS)

    def current_branch(self) -> Result[str, ProcessError]:
        out = self._runner.capture(
            [self._exe, "rev-parse", "--abbrev-ref", "HEAD"], timeout=_GIT_TIMEOUT_SECONDS
        )
        if isinstance(out, Err):
            return out
        return Ok(out.value.strip())
