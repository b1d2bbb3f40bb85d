"""Error payloads of the changelog and version-resolution layer.

Each carries the changelog path when the document came from disk, so the
CLI can point at the file that needs fixing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "ChangelogError",
    "EmptyChangelogError",
    "InvalidPrereleaseError",
    "MalformedDocumentError",
    "NoUnreleasedSectionError",
    "UnknownVersionError",
]


@dataclass(frozen=True, slots=True)
class MalformedDocumentError:
    """Text that does not split into the expected section structure."""

    message: str
    line: int | None = None
    path: Path | None = None

    def pretty(self) -> str:
        where = str(self.path) if self.path is not None else "changelog"
        if self.line is not None:
            where += f":{self.line}"
        return f"{where}: {self.message}"


@dataclass(frozen=True, slots=True)
class NoUnreleasedSectionError:
    path: Path | None = None

    def pretty(self) -> str:
        where = str(self.path) if self.path is not None else "changelog"
        return (
            f"{where}: no unreleased section to finalize"
            " (add '## [Unreleased]' above the latest release)"
        )


@dataclass(frozen=True, slots=True)
class EmptyChangelogError:
    path: Path | None = None

    def pretty(self) -> str:
        where = str(self.path) if self.path is not None else "changelog"
        return f"{where}: no released version found (define at least one '## [X.Y.Z]' section)"


@dataclass(frozen=True, slots=True)
class UnknownVersionError:
    version: str
    path: Path | None = None

    def pretty(self) -> str:
        where = str(self.path) if self.path is not None else "changelog"
        return f"{where}: no section for version {self.version}"


@dataclass(frozen=True, slots=True)
class InvalidPrereleaseError:
    """A prerelease label that would not produce a semantic version."""

    label: str
    path: Path | None = None

    def pretty(self) -> str:
        return (
            f"invalid prerelease label '{self.label}'"
            " (use dot-separated identifiers of [0-9A-Za-z-], e.g. 'rc.1')"
        )


ChangelogError = (
    MalformedDocumentError
    | NoUnreleasedSectionError
    | EmptyChangelogError
    | UnknownVersionError
    | InvalidPrereleaseError
)
