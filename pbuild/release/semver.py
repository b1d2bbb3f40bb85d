from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = ["SemVer", "parse_prerelease", "parse_semver"]


_PRERELEASE_ID = r"(?:0|[1-9][0-9]*|[0-9]*[A-Za-z-][0-9A-Za-z-]*)"
_PRERELEASE = rf"{_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*"
_SEMVER_RE = re.compile(
    r"^v?(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    rf"(?:-({_PRERELEASE}))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$",
    re.ASCII,
)
_PRERELEASE_RE = re.compile(_PRERELEASE, re.ASCII)


def _compare_identifiers(left: tuple[str, ...], right: tuple[str, ...]) -> int:
    # Release (no identifiers) ranks above any prerelease.
    if not left and not right:
        return 0
    if not left:
        return 1
    if not right:
        return -1

    for a, b in zip(left, right):
        if a == b:
            continue
        a_num, b_num = a.isdigit(), b.isdigit()
        if a_num and b_num:
            return -1 if int(a) < int(b) else 1
        if a_num != b_num:
            return -1 if a_num else 1
        return -1 if a < b else 1

    if len(left) == len(right):
        return 0
    return -1 if len(left) < len(right) else 1


@dataclass(frozen=True, slots=True)
class SemVer:
    """Semantic version ordered by semver 2.0.0 precedence.

    Equality is structural (build metadata included) so that a parsed
    changelog compares equal to the one it was serialized from. The ordering
    operators all go through ``compare`` and ignore build metadata, so
    ``1.0.0+a <= 1.0.0+b`` and ``1.0.0+a >= 1.0.0+b`` both hold.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = field(default=())
    build: tuple[str, ...] = field(default=())

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def major_minor_patch(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def compare(self, other: SemVer) -> int:
        """Return -1, 0 or 1 by precedence."""
        core_self = (self.major, self.minor, self.patch)
        core_other = (other.major, other.minor, other.patch)
        if core_self != core_other:
            return -1 if core_self < core_other else 1
        return _compare_identifiers(self.prerelease, other.prerelease)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) >= 0

    def with_prerelease(self, label: str | None) -> SemVer:
        """Replace the prerelease part (None or "" drops it); build metadata is dropped.

        Raises:
            ValueError: ``label`` is not a dot-separated list of prerelease
                identifiers (see ``parse_prerelease``).
        """
        if not label:
            return SemVer(self.major, self.minor, self.patch)
        identifiers = parse_prerelease(label)
        if identifiers is None:
            raise ValueError(f"invalid prerelease label: {label!r}")
        return SemVer(self.major, self.minor, self.patch, identifiers)

    def to_tag(self) -> str:
        return f"v{self}"

    def __str__(self) -> str:
        text = self.major_minor_patch
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def parse_semver(text: str) -> SemVer | None:
    """Parse ``1.2.3``, ``1.2.3-beta.4`` or ``v1.2.3+sha.abc``; None when invalid."""
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    prerelease = tuple(m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def parse_prerelease(label: str) -> tuple[str, ...] | None:
    """Split ``rc.1`` into identifiers; None unless every identifier is valid semver."""
    if _PRERELEASE_RE.fullmatch(label) is None:
        return None
    return tuple(label.split("."))
