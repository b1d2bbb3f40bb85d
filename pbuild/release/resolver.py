"""Release version resolution.

Two sources decide a build's version:

- the changelog, whose highest released section is the single source of truth
  for the version stamped onto produced artifacts;
- the branch context computed from source control, which decides the version
  a changelog finalize stamps: stable branches get a clean
  ``major.minor.patch``, any other branch keeps its prerelease suffix so
  feature-branch builds can never be mistaken for a release.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from pbuild.core.config import DEFAULT_STABLE_BRANCHES
from pbuild.core.result import Err, Ok, Result
from pbuild.release.changelog import ChangelogDocument, ReleaseEntry, release_notes_text
from pbuild.release.errors import ChangelogError, EmptyChangelogError, InvalidPrereleaseError
from pbuild.release.semver import parse_prerelease

__all__ = [
    "BranchContext",
    "ResolvedVersion",
    "latest_version",
    "release_version_string",
    "resolve_release",
    "select_prerelease_tag",
]


@dataclass(frozen=True, slots=True)
class BranchContext:
    """Version facts computed from history by an external tool."""

    branch: str
    semver: str
    major_minor_patch: str


@dataclass(frozen=True, slots=True)
class ResolvedVersion:
    version: str
    notes: str


def select_prerelease_tag(
    context: BranchContext,
    stable_branches: Iterable[str] = DEFAULT_STABLE_BRANCHES,
) -> str:
    if context.branch in set(stable_branches):
        return context.major_minor_patch
    return context.semver


def latest_version(document: ChangelogDocument) -> Result[ReleaseEntry, EmptyChangelogError]:
    """Highest-precedence released entry, wherever it sits in the file."""
    released = document.released
    if not released:
        return Err(EmptyChangelogError())

    best = released[0]
    for entry in released[1:]:
        assert entry.version is not None and best.version is not None
        if entry.version > best.version:
            best = entry
    return Ok(best)


def release_version_string(document: ChangelogDocument) -> Result[str, EmptyChangelogError]:
    latest = latest_version(document)
    if isinstance(latest, Err):
        return latest
    return Ok(str(latest.value.version))


def resolve_release(
    document: ChangelogDocument,
    *,
    prerelease: str | None = None,
    repository_url: str | None = None,
) -> Result[ResolvedVersion, ChangelogError]:
    """Version and notes for the artifacts of this run.

    Args:
        prerelease: Label that replaces the prerelease part of the changelog
            version (``1.2.0`` + ``"rc.1"`` gives ``1.2.0-rc.1``). A label that
            is not valid semver gives ``InvalidPrereleaseError``.
        repository_url: Adds a "full changelog" link to the notes.
    """
    if prerelease and parse_prerelease(prerelease) is None:
        return Err(InvalidPrereleaseError(prerelease))

    latest = latest_version(document)
    if isinstance(latest, Err):
        return latest

    version = latest.value.version
    assert version is not None
    notes = release_notes_text(document, version, repository_url=repository_url)
    if isinstance(notes, Err):
        return notes

    rendered = str(version.with_prerelease(prerelease)) if prerelease else str(version)
    return Ok(ResolvedVersion(version=rendered, notes=notes.value))
