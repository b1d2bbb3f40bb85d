"""GitVersion adapter: the external source of a build's branch context.

How GitVersion derives versions from history is its own business; pbuild only
reads three fields of its JSON output.
"""

from __future__ import annotations

import json

from pbuild.core.result import Err, Ok, Result
from pbuild.core.structured import as_str_dict, get_str
from pbuild.pipeline.errors import StepError
from pbuild.platform.process import ProcessError
from pbuild.release.resolver import BranchContext
from pbuild.tools.base import CommandRunner

__all__ = ["GitVersion", "parse_gitversion_output"]

_GITVERSION_TIMEOUT_SECONDS = 2 * 60.0


def parse_gitversion_output(text: str) -> Result[BranchContext, StepError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(StepError(f"invalid gitversion output: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(StepError("invalid gitversion output: expected a JSON object"))

    branch = get_str(data, "BranchName")
    semver = get_str(data, "SemVer")
    mmp = get_str(data, "MajorMinorPatch")
    if branch is None or semver is None or mmp is None:
        return Err(
            StepError(
                "gitversion output lacks BranchName, SemVer or MajorMinorPatch",
                hint="Run: dotnet-gitversion /output json",
            )
        )
    return Ok(BranchContext(branch=branch, semver=semver, major_minor_patch=mmp))


class GitVersion:
    def __init__(self, runner: CommandRunner, *, executable: str = "dotnet-gitversion") -> None:
        self._runner = runner
        self._exe = executable

    def branch_context(self) -> Result[BranchContext, ProcessError | StepError]:
        out = self._runner.capture(
            [self._exe, "/output", "json"], timeout=_GITVERSION_TIMEOUT_SECONDS
        )
        if isinstance(out, Err):
            return out
        return parse_gitversion_output(out.value)
