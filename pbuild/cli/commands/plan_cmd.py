from __future__ import annotations

import typer

from pbuild.cli.commands._helpers import exit_on_error
from pbuild.cli.context import build_context, build_registry
from pbuild.output.console import Style


def plan(
    targets: list[str] = typer.Argument(..., help="Targets to plan."),
) -> None:
    """Print the execution order without running anything."""
    ctx = build_context()
    registry = build_registry(ctx)

    order = exit_on_error(registry.resolve_order(*targets), ctx)
    for index, name in enumerate(order, start=1):
        target = registry.get(name)
        assert target is not None
        line = f"{index:>2}. {name}"
        if target.only_when is not None:
            line += "  (conditional)"
        ctx.console.print(line, Style.BOLD if name in targets else Style.DEFAULT)
