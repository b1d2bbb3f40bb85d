"""External tool adapters called from target bodies."""

from __future__ import annotations

from dataclasses import dataclass

from .base import CommandRunner, ProcessRunner, RecordingRunner
from .docfx import DocFx
from .dotnet import DotNet, PackSettings
from .git import Git
from .gitversion import GitVersion

__all__ = [
    "CommandRunner",
    "DocFx",
    "DotNet",
    "Git",
    "GitVersion",
    "PackSettings",
    "ProcessRunner",
    "RecordingRunner",
    "Toolset",
]


@dataclass(frozen=True, slots=True)
class Toolset:
    """The adapters a build context hands to target bodies."""

    dotnet: DotNet
    docfx: DocFx
    git: Git
    gitversion: GitVersion

    @classmethod
    def over(cls, runner: CommandRunner) -> Toolset:
        """All adapters sharing one runner."""
        return cls(
            dotnet=DotNet(runner),
            docfx=DocFx(runner),
            git=Git(runner),
            gitversion=GitVersion(runner),
        )
