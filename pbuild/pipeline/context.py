"""The explicit context handed to the scheduler and every target body.

Everything a target may consult about its surroundings (workspace paths,
config, invocation parameters, CI facts, tool adapters) is gathered here once,
when the context is built. Target bodies never read the process environment
themselves.
"""

from __future__ import annotations

import datetime
import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Literal

from pbuild.core.config import Config, ConfigError
from pbuild.core.result import Err, Ok, Result
from pbuild.core.structured import as_str_dict, get_int
from pbuild.core.workspace import Workspace
from pbuild.output.console import ConsoleProtocol
from pbuild.tools import Toolset

__all__ = [
    "BuildContext",
    "BuildEnvironment",
    "CONFIGURATIONS",
    "Configuration",
    "read_environment",
]

Configuration = Literal["Debug", "Release"]
CONFIGURATIONS: tuple[Configuration, ...] = ("Debug", "Release")

_CI_VARIABLES = ("CI", "GITHUB_ACTIONS", "TF_BUILD", "TEAMCITY_VERSION", "JENKINS_URL")


@dataclass(frozen=True, slots=True)
class BuildEnvironment:
    """Facts taken from the process environment at startup."""

    is_server_build: bool = False
    run_number: int = 0
    api_key: str | None = None

    @property
    def default_configuration(self) -> Configuration:
        return "Release" if self.is_server_build else "Debug"


def _run_number(payload: str | None) -> Result[int, ConfigError]:
    if payload is None or not payload.strip():
        return Ok(0)
    try:
        obj: object = json.loads(payload)
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"GITHUB_CONTEXT is not valid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigError("GITHUB_CONTEXT must be a JSON object"))
    if "run_number" not in data:
        return Ok(0)
    number = get_int(data, "run_number")
    if number is None or number < 0:
        value = data["run_number"]
        return Err(ConfigError(f"GITHUB_CONTEXT run_number is not a number: {value!r}"))
    return Ok(number)


def read_environment(env: Mapping[str, str]) -> Result[BuildEnvironment, ConfigError]:
    """Read CI markers, the run number and the package feed API key."""
    run_number = _run_number(env.get("GITHUB_CONTEXT"))
    if isinstance(run_number, Err):
        return run_number

    is_server = any(env.get(name, "").strip() not in ("", "0", "false") for name in _CI_VARIABLES)
    api_key = (env.get("NUGET_API_KEY") or "").strip() or None
    return Ok(
        BuildEnvironment(
            is_server_build=is_server,
            run_number=run_number.value,
            api_key=api_key,
        )
    )


@dataclass(frozen=True, slots=True)
class BuildContext:
    workspace: Workspace
    console: ConsoleProtocol
    tools: Toolset
    configuration: Configuration = "Debug"
    prerelease: str | None = None
    source: str | None = None
    environment: BuildEnvironment = BuildEnvironment()
    requested: tuple[str, ...] = ()
    dry_run: bool = False
    today: Callable[[], datetime.date] = datetime.date.today

    @property
    def config(self) -> Config:
        return self.workspace.config

    @property
    def feed_source(self) -> str:
        """``--source`` if given, else the configured feed."""
        return self.source or self.config.feed_source

    @property
    def run_number(self) -> int:
        return self.environment.run_number
