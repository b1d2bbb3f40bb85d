from __future__ import annotations

import typer

from pbuild.cli.commands._helpers import exit_on_error
from pbuild.cli.context import (
    build_context,
    build_registry,
    build_run_context,
    check_prerelease,
    parse_configuration,
)
from pbuild.core.errors import ErrorCode
from pbuild.core.result import Err
from pbuild.output.errors import error_exit_code, print_error
from pbuild.pipeline.scheduler import Scheduler


def run(
    targets: list[str] | None = typer.Argument(
        None, help="Targets to run (default: the configured default target)."
    ),
    configuration: str | None = typer.Option(
        None,
        "--configuration",
        "-c",
        help="Debug or Release (default: Release on CI servers, Debug locally).",
    ),
    prerelease: str | None = typer.Option(
        None, "--prerelease", help="Prerelease label stamped onto package versions."
    ),
    source: str | None = typer.Option(None, "--source", help="Package feed address."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them."),
) -> None:
    """Run targets and everything they depend on."""
    ctx = build_context()
    registry = build_registry(ctx)

    requested = tuple(targets) if targets else (ctx.workspace.config.project.default_target,)
    build_ctx = build_run_context(
        ctx,
        configuration=parse_configuration(configuration, ctx),
        prerelease=check_prerelease(prerelease, ctx),
        source=source,
        requested=requested,
        dry_run=dry_run,
    )

    scheduler = Scheduler(registry, build_ctx)
    exit_on_error(scheduler.plan(*requested), ctx)

    result = scheduler.run(*requested)
    if isinstance(result, Err):
        print_error(result.error, ctx.console)
        raise typer.Exit(code=error_exit_code(result.error))
    raise typer.Exit(code=int(ErrorCode.OK))
