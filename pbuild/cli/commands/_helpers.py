"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from pbuild.core.result import Err, Result
from pbuild.output.errors import error_exit_code, print_error

if TYPE_CHECKING:
    from pbuild.cli.context import CLIContext


def exit_on_error[T, E](result: Result[T, E], ctx: CLIContext) -> T:
    """Return the value of an Ok result; print an Err and exit with its code.

    Replaces the recurring pattern:
        match result:
            case Err(e):
                print_error(e, ctx.console)
                raise typer.Exit(code=error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        fail(result.error, ctx)
    return result.value


def fail(error: object, ctx: CLIContext) -> NoReturn:
    print_error(error, ctx.console)
    raise typer.Exit(code=error_exit_code(error))
