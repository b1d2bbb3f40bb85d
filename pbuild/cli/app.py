from __future__ import annotations

import os
from pathlib import Path

import typer

from pbuild import __version__
from pbuild.cli.commands.plan_cmd import plan
from pbuild.cli.commands.run_cmd import run
from pbuild.cli.commands.targets_cmd import targets
from pbuild.cli.commands.version_cmd import version
from pbuild.core.errors import ErrorCode
from pbuild.core.workspace import MARKER_FILE, is_workspace_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(run)
app.command()(plan)
app.command()(targets)
app.command()(version)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show pbuild version and exit.",
    ),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        help="Workspace root (overrides auto detection)",
    ),
) -> None:
    if workspace is not None:
        try:
            root = workspace.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --workspace: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir() or not is_workspace_root(root):
            typer.echo(
                f"error: --workspace '{root}' is not a valid workspace (missing {MARKER_FILE})",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ["WORKSPACE_ROOT"] = str(root)


def main() -> None:
    app()
