"""Command runners shared by the tool adapters.

Adapters build argument lists and hand them to a ``CommandRunner``. The
production ``ProcessRunner`` echoes each command to the console and executes
it; ``RecordingRunner`` only records, for tests and for inspecting what a
target would do.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from pbuild.core.result import Err, Ok, Result
from pbuild.output.console import ConsoleProtocol, Style
from pbuild.platform.process import ProcessError, run, run_silent

__all__ = ["CommandRunner", "ProcessRunner", "RecordedCommand", "RecordingRunner"]


class CommandRunner(Protocol):
    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Result[None, ProcessError]:
        """Run a build step; output streams to the terminal."""
        ...

    def capture(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        """Run a read-only query and return its stdout."""
        ...


class ProcessRunner:
    """Runs commands in the workspace root unless told otherwise.

    With ``dry_run`` set, ``run`` only prints; ``capture`` still executes
    because queries have no side effects and targets need their answers.
    Values listed in ``secrets`` are masked in the echoed command lines.
    """

    def __init__(
        self,
        *,
        root: Path,
        console: ConsoleProtocol,
        dry_run: bool = False,
        env: dict[str, str] | None = None,
        secrets: tuple[str, ...] = (),
    ) -> None:
        self._root = root
        self._console = console
        self._dry_run = dry_run
        self._env = env
        self._secrets = tuple(s for s in secrets if s)

    def _echo(self, args: list[str]) -> None:
        line = " ".join(args)
        for secret in self._secrets:
            line = line.replace(secret, "***")
        self._console.print(line, Style.DIM)

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Result[None, ProcessError]:
        self._echo(args)
        if self._dry_run:
            return Ok(None)
        return run_silent(args, cwd=cwd or self._root, env=self._env, timeout=timeout)

    def capture(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self._echo(args)
        return run(args, cwd=cwd or self._root, env=self._env, timeout=timeout)


@dataclass(frozen=True, slots=True)
class RecordedCommand:
    args: tuple[str, ...]
    cwd: Path | None
    timeout: float | None


def _empty_commands() -> list[RecordedCommand]:
    return []


def _empty_outputs() -> dict[str, str]:
    return {}


def _empty_failures() -> dict[str, int]:
    return {}


@dataclass
class RecordingRunner:
    """Runner that records commands instead of executing them.

    ``outputs`` maps a command prefix (space-joined) to the stdout returned by
    ``capture``; ``failures`` maps a prefix to the exit code to fail with.
    """

    outputs: Mapping[str, str] = field(default_factory=_empty_outputs)
    failures: Mapping[str, int] = field(default_factory=_empty_failures)
    commands: list[RecordedCommand] = field(default_factory=_empty_commands)

    def _match(self, table: Mapping[str, object], args: list[str]) -> str | None:
        line = " ".join(args)
        for prefix in table:
            if line == prefix or line.startswith(prefix + " "):
                return prefix
        return None

    def _failure(self, args: list[str]) -> ProcessError | None:
        prefix = self._match(self.failures, args)
        if prefix is None:
            return None
        return ProcessError(
            command=tuple(args), returncode=self.failures[prefix], stdout="", stderr=""
        )

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Result[None, ProcessError]:
        self.commands.append(RecordedCommand(tuple(args), cwd, timeout))
        failure = self._failure(args)
        if failure is not None:
            return Err(failure)
        return Ok(None)

    def capture(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self.commands.append(RecordedCommand(tuple(args), cwd, timeout))
        failure = self._failure(args)
        if failure is not None:
            return Err(failure)
        prefix = self._match(self.outputs, args)
        return Ok(self.outputs[prefix] if prefix is not None else "")

    # Test helpers

    @property
    def lines(self) -> list[str]:
        return [" ".join(c.args) for c in self.commands]
