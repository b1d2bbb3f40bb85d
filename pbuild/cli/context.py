from __future__ import annotations

import os
from dataclasses import dataclass

import typer

from pbuild.core.config import load_config
from pbuild.core.errors import ErrorCode
from pbuild.core.result import Err
from pbuild.core.workspace import Workspace, detect_workspace
from pbuild.output.console import ConsoleProtocol, RichConsole, Style
from pbuild.output.errors import error_exit_code, print_error
from pbuild.pipeline.context import (
    CONFIGURATIONS,
    BuildContext,
    BuildEnvironment,
    Configuration,
    read_environment,
)
from pbuild.pipeline.graph import TargetRegistry
from pbuild.pipeline.standard import standard_registry
from pbuild.release.errors import InvalidPrereleaseError
from pbuild.release.semver import parse_prerelease
from pbuild.tools import ProcessRunner, Toolset


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    environment: BuildEnvironment
    console: ConsoleProtocol


def build_context() -> CLIContext:
    console = RichConsole()

    workspace_result = detect_workspace()
    if isinstance(workspace_result, Err):
        console.error(workspace_result.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    workspace = workspace_result.value

    config_result = load_config(workspace.config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    env_result = read_environment(os.environ)
    if isinstance(env_result, Err):
        console.error(env_result.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        workspace=workspace.with_config(config_result.value),
        environment=env_result.value,
        console=console,
    )


def build_registry(ctx: CLIContext) -> TargetRegistry:
    """The validated target registry; graph errors end the process before anything runs."""
    registry = standard_registry()
    validated = registry.validate()
    if isinstance(validated, Err):
        print_error(validated.error, ctx.console)
        raise typer.Exit(code=error_exit_code(validated.error))
    return registry


def parse_configuration(value: str | None, ctx: CLIContext) -> Configuration:
    if value is None:
        return ctx.environment.default_configuration
    for name in CONFIGURATIONS:
        if value.lower() == name.lower():
            return name
    ctx.console.error(f"Unknown configuration: {value}")
    ctx.console.print(f"Available: {', '.join(CONFIGURATIONS)}", Style.DIM)
    raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def check_prerelease(value: str | None, ctx: CLIContext) -> str | None:
    """The ``--prerelease`` label, rejected before any target runs when invalid."""
    if value and parse_prerelease(value) is None:
        error = InvalidPrereleaseError(value)
        print_error(error, ctx.console)
        raise typer.Exit(code=error_exit_code(error))
    return value or None


def build_run_context(
    ctx: CLIContext,
    *,
    configuration: Configuration,
    prerelease: str | None,
    source: str | None,
    requested: tuple[str, ...],
    dry_run: bool,
) -> BuildContext:
    api_key = ctx.environment.api_key
    runner = ProcessRunner(
        root=ctx.workspace.root,
        console=ctx.console,
        dry_run=dry_run,
        secrets=(api_key,) if api_key else (),
    )
    return BuildContext(
        workspace=ctx.workspace,
        console=ctx.console,
        tools=Toolset.over(runner),
        configuration=configuration,
        prerelease=prerelease,
        source=source,
        environment=ctx.environment,
        requested=requested,
        dry_run=dry_run,
    )
