"""External command execution for tool adapters.

Every dotnet, git or docfx invocation ends up here. ``run`` captures output
for commands whose stdout is parsed (gitversion, ``git rev-parse``);
``run_silent`` lets long build steps stream straight to the terminal and
only reports the exit status.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from pbuild.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]

# Reported when the process never produced an exit status of its own.
NO_EXIT_STATUS = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """An external command that could not be started or exited non-zero.

    ``returncode`` is ``NO_EXIT_STATUS`` for launch failures and timeouts; in
    that case ``stderr`` holds the reason instead of process output.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown = f"{shown} ..."
        return f"{shown} failed (exit {self.returncode})"

    def pretty(self) -> str:
        """One line for the build log, with the last stderr line when there is one."""
        lines = self.stderr.strip().splitlines()
        return f"{self} ({lines[-1]})" if lines else str(self)


def _execute(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    *,
    capture: bool,
) -> Result[subprocess.CompletedProcess[str], ProcessError]:
    command = tuple(cmd)
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        reason = f"Command timed out after {timeout}s"
        return Err(ProcessError(command, NO_EXIT_STATUS, "", reason))
    except OSError as e:
        return Err(ProcessError(command, NO_EXIT_STATUS, "", str(e)))

    if completed.returncode != 0:
        return Err(
            ProcessError(
                command,
                completed.returncode,
                completed.stdout or "",
                completed.stderr or "",
            )
        )
    return Ok(completed)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its standard output.

    ``env`` replaces the inherited environment when given.
    """
    match _execute(cmd, cwd, env, timeout, capture=True):
        case Ok(completed):
            return Ok(completed.stdout)
        case Err() as err:
            return err


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run ``cmd`` with inherited stdio; only the exit status is kept."""
    match _execute(cmd, cwd, env, timeout, capture=False):
        case Ok():
            return Ok(None)
        case Err() as err:
            return err
