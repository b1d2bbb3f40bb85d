"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pbuild.core.errors import ErrorCode
from pbuild.output.console import Style
from pbuild.pipeline.errors import (
    CyclicDependencyError,
    DuplicateTargetError,
    TargetExecutionError,
    UnknownTargetError,
    describe_cause,
)
from pbuild.release.errors import (
    EmptyChangelogError,
    InvalidPrereleaseError,
    MalformedDocumentError,
    NoUnreleasedSectionError,
    UnknownVersionError,
)

if TYPE_CHECKING:
    from pbuild.output.console import ConsoleProtocol

__all__ = ["error_exit_code", "print_error"]


def print_error(error: object, console: ConsoleProtocol) -> None:
    """Print an error and, for failed targets, the chain of causes."""
    match error:
        case UnknownTargetError(available=available, required_by=None):
            console.error(error.pretty())
            if available:
                console.print(f"Available: {', '.join(available)}", Style.DIM)
        case TargetExecutionError(target=target, cause=cause):
            console.error(f"target '{target}' failed")
            console.print(f"  caused by: {describe_cause(cause)}", Style.DIM)
            hint = getattr(cause, "hint", None)
            if isinstance(hint, str) and hint:
                console.print(f"  hint: {hint}", Style.DIM)
        case _:
            console.error(describe_cause(error))


def error_exit_code(error: object) -> int:
    match error:
        case UnknownTargetError(required_by=None) | InvalidPrereleaseError():
            return int(ErrorCode.USER_ERROR)
        case UnknownTargetError() | DuplicateTargetError() | CyclicDependencyError():
            return int(ErrorCode.GRAPH_ERROR)
        case (
            MalformedDocumentError()
            | NoUnreleasedSectionError()
            | EmptyChangelogError()
            | UnknownVersionError()
        ):
            return int(ErrorCode.CHANGELOG_ERROR)
        case TargetExecutionError(cause=cause):
            if isinstance(
                cause,
                MalformedDocumentError
                | NoUnreleasedSectionError
                | EmptyChangelogError
                | UnknownVersionError,
            ):
                return int(ErrorCode.CHANGELOG_ERROR)
            return int(ErrorCode.BUILD_ERROR)
        case _:
            return int(ErrorCode.ENV_ERROR)
