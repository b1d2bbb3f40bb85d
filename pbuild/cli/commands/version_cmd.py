from __future__ import annotations

import typer

from pbuild.cli.commands._helpers import exit_on_error
from pbuild.cli.context import build_context
from pbuild.output.console import Style
from pbuild.release.changelog import load_changelog, with_path
from pbuild.release.resolver import resolve_release


def version(
    prerelease: str | None = typer.Option(
        None, "--prerelease", help="Prerelease label to apply, as for a run."
    ),
    notes: bool = typer.Option(False, "--notes", help="Also print the release notes."),
) -> None:
    """Print the release version (and notes) derived from the changelog."""
    ctx = build_context()
    path = ctx.workspace.changelog_path

    document = exit_on_error(load_changelog(path), ctx)
    resolved = exit_on_error(
        with_path(
            resolve_release(
                document,
                prerelease=prerelease,
                repository_url=ctx.workspace.config.project.repository_url,
            ),
            path,
        ),
        ctx,
    )

    ctx.console.print(resolved.version, Style.BOLD)
    if notes and resolved.notes:
        ctx.console.newline()
        for line in resolved.notes.splitlines():
            ctx.console.print(line)
