"""Changelog document model.

The changelog is a human-edited markdown file in the "Keep a Changelog"
layout:

    # Changelog
    Free-form preamble.

    ## [Unreleased]
    - Upcoming change

    ## [1.2.0] - 2024-05-01
    - Released change

    [Unreleased]: https://github.com/owner/repo/compare/1.2.0...HEAD
    [1.2.0]: https://github.com/owner/repo/compare/1.1.0...1.2.0

Lines before the first ``## `` heading are the preamble. Each ``## `` heading
opens a section that runs until the next one. A trailing block of link
reference definitions is kept apart so finalizing can rewrite it.

``parse`` accepts ``Unreleased``/``vNext`` placeholders with or without
brackets and dates separated by `` - `` or `` / ``; ``serialize`` always writes
the canonical ``## [Unreleased]`` / ``## [X.Y.Z] - YYYY-MM-DD`` forms, so
canonical text survives ``serialize(parse(text))`` unchanged.
"""

from __future__ import annotations

import dataclasses
import datetime
import re
from dataclasses import dataclass
from pathlib import Path

from pbuild.core.result import Err, Ok, Result
from pbuild.platform.files import atomic_write_text
from pbuild.release.errors import (
    ChangelogError,
    EmptyChangelogError,
    MalformedDocumentError,
    NoUnreleasedSectionError,
    UnknownVersionError,
)
from pbuild.release.semver import SemVer, parse_semver

__all__ = [
    "ChangelogDocument",
    "LinkReference",
    "ReleaseEntry",
    "extract_section_notes",
    "finalize",
    "load_changelog",
    "parse",
    "release_notes_text",
    "save_changelog",
    "serialize",
    "with_path",
]

UNRELEASED_LABELS = frozenset({"unreleased", "vnext"})
UNRELEASED_HEADING = "## [Unreleased]"

_HEADING_RE = re.compile(r"^##\s+(?P<body>\S.*?)\s*$")
_SECTION_RE = re.compile(
    r"^(?:\[(?P<bracketed>[^\]]+)\]|(?P<bare>[^\s\[\]]+))(?:\s+[-/]\s+(?P<date>\S+))?$"
)
_LINK_RE = re.compile(r"^\[(?P<label>[^\]]+)\]:\s*(?P<url>\S+)\s*$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, slots=True)
class ReleaseEntry:
    """One ``## `` section; ``version`` is None for the unreleased placeholder."""

    version: SemVer | None
    date: datetime.date | None = None
    notes: tuple[str, ...] = ()

    @property
    def is_unreleased(self) -> bool:
        return self.version is None

    def heading(self) -> str:
        if self.version is None:
            return UNRELEASED_HEADING
        text = f"## [{self.version}]"
        if self.date is not None:
            text += f" - {self.date.isoformat()}"
        return text


@dataclass(frozen=True, slots=True)
class LinkReference:
    label: str
    url: str

    def render(self) -> str:
        return f"[{self.label}]: {self.url}"


@dataclass(frozen=True, slots=True)
class ChangelogDocument:
    entries: tuple[ReleaseEntry, ...] = ()
    preamble: tuple[str, ...] = ()
    links: tuple[LinkReference, ...] = ()
    # Line ending of the source text, reused when serializing.
    newline: str = "\n"

    @property
    def released(self) -> tuple[ReleaseEntry, ...]:
        return tuple(e for e in self.entries if e.version is not None)

    def find(self, version: SemVer) -> ReleaseEntry | None:
        for entry in self.entries:
            if entry.version == version:
                return entry
        return None


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


def _parse_heading(body: str, lineno: int) -> Result[ReleaseEntry, MalformedDocumentError]:
    m = _SECTION_RE.match(body)
    if m is None:
        return Err(MalformedDocumentError(f"unrecognized section heading '## {body}'", line=lineno))

    label = (m.group("bracketed") or m.group("bare") or "").strip()
    raw_date = m.group("date")

    if label.lower() in UNRELEASED_LABELS:
        if raw_date is not None:
            return Err(
                MalformedDocumentError("unreleased section must not carry a date", line=lineno)
            )
        return Ok(ReleaseEntry(version=None))

    version = parse_semver(label)
    if version is None:
        return Err(MalformedDocumentError(f"invalid semantic version '{label}'", line=lineno))

    date: datetime.date | None = None
    if raw_date is not None:
        if _DATE_RE.match(raw_date) is None:
            return Err(MalformedDocumentError(f"invalid release date '{raw_date}'", line=lineno))
        try:
            date = datetime.date.fromisoformat(raw_date)
        except ValueError:
            return Err(MalformedDocumentError(f"invalid release date '{raw_date}'", line=lineno))

    return Ok(ReleaseEntry(version=version, date=date))


def _split_links(lines: list[str]) -> tuple[list[str], list[LinkReference]]:
    """Split a trailing block of link definitions off the last section's lines."""
    start = len(lines)
    while start > 0 and _LINK_RE.match(lines[start - 1]):
        start -= 1
    if start == len(lines):
        return lines, []

    links: list[LinkReference] = []
    for line in lines[start:]:
        m = _LINK_RE.match(line)
        assert m is not None
        links.append(LinkReference(label=m.group("label"), url=m.group("url")))
    return lines[:start], links


def parse(text: str) -> Result[ChangelogDocument, MalformedDocumentError]:
    """Parse changelog text into a document."""
    preamble: list[str] = []
    sections: list[tuple[ReleaseEntry, list[str]]] = []
    seen: set[SemVer] = set()

    for lineno, line in enumerate(text.splitlines(), start=1):
        heading = _HEADING_RE.match(line)
        if heading is None:
            if sections:
                sections[-1][1].append(line)
            else:
                preamble.append(line)
            continue

        entry = _parse_heading(heading.group("body"), lineno)
        if isinstance(entry, Err):
            return entry
        version = entry.value.version
        if version is not None:
            if version in seen:
                return Err(
                    MalformedDocumentError(f"version {version} appears more than once", line=lineno)
                )
            seen.add(version)
        sections.append((entry.value, []))

    links: list[LinkReference] = []
    if sections:
        body, links = _split_links(sections[-1][1])
        sections[-1] = (sections[-1][0], body)

    entries = tuple(dataclasses.replace(entry, notes=tuple(body)) for entry, body in sections)
    return Ok(
        ChangelogDocument(
            entries=entries,
            preamble=tuple(preamble),
            links=tuple(links),
            newline="\r\n" if "\r\n" in text else "\n",
        )
    )


def serialize(document: ChangelogDocument) -> str:
    lines: list[str] = list(document.preamble)
    for entry in document.entries:
        lines.append(entry.heading())
        lines.extend(entry.notes)
    lines.extend(link.render() for link in document.links)
    if not lines:
        return ""
    return document.newline.join(lines) + document.newline


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------


def _previous_release(document: ChangelogDocument, version: SemVer) -> SemVer | None:
    older = [v for v in (e.version for e in document.entries) if v is not None and v < version]
    return max(older) if older else None


def _update_links(
    document: ChangelogDocument, version: SemVer, repository_url: str
) -> tuple[LinkReference, ...]:
    base = repository_url.rstrip("/")
    previous = _previous_release(document, version)
    release_url = (
        f"{base}/compare/{previous}...{version}" if previous else f"{base}/tree/{version}"
    )
    replaced = {"unreleased", "vnext", str(version).lower()}
    kept = tuple(link for link in document.links if link.label.lower() not in replaced)
    return (
        LinkReference("Unreleased", f"{base}/compare/{version}...HEAD"),
        LinkReference(str(version), release_url),
        *kept,
    )


def finalize(
    document: ChangelogDocument,
    version: SemVer,
    date: datetime.date,
    *,
    repository_url: str | None = None,
    reopen: bool = False,
) -> Result[ChangelogDocument, ChangelogError]:
    """Stamp the first unreleased section with ``version`` and ``date``.

    Other sections are left untouched. When several unreleased sections
    exist only the first is stamped; the rest wait for a later finalize.

    Args:
        repository_url: When set, the trailing compare links are rewritten
            so ``[Unreleased]`` compares from the new version to HEAD and the
            new version compares against the previous release.
        reopen: Insert a fresh, empty ``## [Unreleased]`` section above the
            stamped one.
    """
    index = next((i for i, e in enumerate(document.entries) if e.is_unreleased), None)
    if index is None:
        return Err(NoUnreleasedSectionError())
    if document.find(version) is not None:
        return Err(MalformedDocumentError(f"version {version} is already released"))

    current = document.entries[index]
    stamped = ReleaseEntry(version=version, date=date, notes=current.notes)
    head = list(document.entries[:index])
    if reopen:
        head.append(ReleaseEntry(version=None, notes=("",)))
    entries = (*head, stamped, *document.entries[index + 1 :])

    links = document.links
    if repository_url:
        links = _update_links(document, version, repository_url)

    return Ok(dataclasses.replace(document, entries=entries, links=links))


def _trim_blank(lines: tuple[str, ...]) -> tuple[str, ...]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def extract_section_notes(
    document: ChangelogDocument, version: SemVer | None = None
) -> Result[tuple[str, ...], ChangelogError]:
    """Note lines of one section, without surrounding blank lines.

    ``version=None`` selects the first section, released or not.
    """
    if version is None:
        if not document.entries:
            return Err(EmptyChangelogError())
        return Ok(_trim_blank(document.entries[0].notes))

    entry = document.find(version)
    if entry is None:
        return Err(UnknownVersionError(version=str(version)))
    return Ok(_trim_blank(entry.notes))


def release_notes_text(
    document: ChangelogDocument,
    version: SemVer | None = None,
    *,
    repository_url: str | None = None,
    changelog_name: str = "CHANGELOG.md",
) -> Result[str, ChangelogError]:
    """Release notes as embedded in package metadata.

    Markdown bullets become ``•`` and inline-code backticks are dropped, since
    package galleries render this text verbatim.
    """
    notes = extract_section_notes(document, version)
    if isinstance(notes, Err):
        return notes

    lines = [_plain(line) for line in notes.value]
    if repository_url:
        lines.append("")
        lines.append(f"Full changelog at {repository_url.rstrip('/')}/blob/HEAD/{changelog_name}")
    return Ok("\n".join(lines))


def _plain(line: str) -> str:
    stripped = line.lstrip()
    indent = line[: len(line) - len(stripped)]
    if stripped.startswith(("- ", "* ")):
        stripped = "• " + stripped[2:]
    return indent + stripped.replace("`", "")


# -----------------------------------------------------------------------------
# Files
# -----------------------------------------------------------------------------


def _at(error: ChangelogError, path: Path) -> ChangelogError:
    return dataclasses.replace(error, path=path)


def load_changelog(path: Path) -> Result[ChangelogDocument, ChangelogError]:
    """Read and parse the changelog; always from disk, never cached."""
    try:
        text = path.read_bytes().decode("utf-8")
    except OSError as e:
        return Err(MalformedDocumentError(f"cannot read changelog: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(MalformedDocumentError(f"changelog is not valid UTF-8: {e}", path=path))

    parsed = parse(text)
    if isinstance(parsed, Err):
        return Err(_at(parsed.error, path))
    return parsed


def save_changelog(path: Path, document: ChangelogDocument) -> Result[None, ChangelogError]:
    try:
        atomic_write_text(path, serialize(document))
    except OSError as e:
        return Err(MalformedDocumentError(f"cannot write changelog: {e}", path=path))
    return Ok(None)


def with_path[T](result: Result[T, ChangelogError], path: Path) -> Result[T, ChangelogError]:
    """Attach ``path`` to the error of a result produced from an in-memory document."""
    if isinstance(result, Err):
        return Err(_at(result.error, path))
    return result
