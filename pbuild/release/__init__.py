"""Changelog model and release version resolution."""

from .changelog import (
    ChangelogDocument,
    ReleaseEntry,
    extract_section_notes,
    finalize,
    load_changelog,
    parse,
    save_changelog,
    serialize,
)
from .errors import (
    ChangelogError,
    EmptyChangelogError,
    InvalidPrereleaseError,
    MalformedDocumentError,
    NoUnreleasedSectionError,
)
from .resolver import (
    BranchContext,
    ResolvedVersion,
    latest_version,
    release_version_string,
    resolve_release,
    select_prerelease_tag,
)
from .semver import SemVer, parse_prerelease, parse_semver

__all__ = [
    "BranchContext",
    "ChangelogDocument",
    "ChangelogError",
    "EmptyChangelogError",
    "InvalidPrereleaseError",
    "MalformedDocumentError",
    "NoUnreleasedSectionError",
    "ReleaseEntry",
    "ResolvedVersion",
    "SemVer",
    "extract_section_notes",
    "finalize",
    "latest_version",
    "load_changelog",
    "parse",
    "parse_prerelease",
    "parse_semver",
    "release_version_string",
    "resolve_release",
    "save_changelog",
    "select_prerelease_tag",
    "serialize",
]
