from __future__ import annotations

from pbuild.cli.context import build_context, build_registry
from pbuild.output.console import Style


def targets() -> None:
    """List registered targets with their constraints."""
    ctx = build_context()
    registry = build_registry(ctx)
    default = ctx.workspace.config.project.default_target

    width = max((len(n) for n in registry.names()), default=0) + 2
    pad = " " * width
    for target in registry:
        marker = " (default)" if target.name == default else ""
        ctx.console.print(f"{target.name.ljust(width)}{target.description}{marker}", Style.BOLD)
        if target.depends_on:
            ctx.console.print(f"{pad}depends on: {', '.join(target.depends_on)}", Style.DIM)
        if target.before:
            ctx.console.print(f"{pad}before: {', '.join(target.before)}", Style.DIM)
        if target.after:
            ctx.console.print(f"{pad}after: {', '.join(target.after)}", Style.DIM)
