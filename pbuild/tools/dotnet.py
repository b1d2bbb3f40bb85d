"""dotnet CLI adapter: restore, build, test, pack, push and tool install."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pbuild.core.result import Result
from pbuild.platform.process import ProcessError
from pbuild.tools.base import CommandRunner

__all__ = ["DotNet", "PackSettings", "msbuild_escape"]

_BUILD_TIMEOUT_SECONDS = 30 * 60.0
_TEST_TIMEOUT_SECONDS = 60 * 60.0


def msbuild_escape(value: str) -> str:
    """Escape a value for use in a ``-p:Name=value`` property."""
    out = value.replace("%", "%25")
    for char, code in ((";", "%3B"), (",", "%2C"), ("\r", ""), ("\n", "%0A"), ('"', "%22")):
        out = out.replace(char, code)
    return out


def _version_props(version: str, assembly_version: str) -> list[str]:
    return [
        f"-p:AssemblyVersion={assembly_version}",
        f"-p:FileVersion={assembly_version}",
        f"-p:Version={version}",
    ]


@dataclass(frozen=True, slots=True)
class PackSettings:
    configuration: str
    version: str
    assembly_version: str
    output_dir: Path
    release_notes: str | None = None
    description: str | None = None
    project_url: str | None = None
    include_symbols: bool = True


class DotNet:
    def __init__(self, runner: CommandRunner, *, executable: str = "dotnet") -> None:
        self._runner = runner
        self._exe = executable

    def restore(self, solution: Path | None) -> Result[None, ProcessError]:
        args = [self._exe, "restore"]
        if solution is not None:
            args.append(str(solution))
        return self._runner.run(args, timeout=_BUILD_TIMEOUT_SECONDS)

    def build(
        self,
        solution: Path | None,
        *,
        configuration: str,
        version: str,
        assembly_version: str,
    ) -> Result[None, ProcessError]:
        args = [self._exe, "build"]
        if solution is not None:
            args.append(str(solution))
        args += ["--configuration", configuration, "--no-restore"]
        args += _version_props(version, assembly_version)
        return self._runner.run(args, timeout=_BUILD_TIMEOUT_SECONDS)

    def test(
        self,
        project: Path,
        *,
        configuration: str,
        results_dir: Path,
        logger: str = "trx",
    ) -> Result[None, ProcessError]:
        args = [
            self._exe,
            "test",
            str(project),
            "--configuration",
            configuration,
            "--results-directory",
            str(results_dir),
            "--logger",
            logger,
            "--verbosity",
            "normal",
            "--no-build",
        ]
        return self._runner.run(args, cwd=project.parent, timeout=_TEST_TIMEOUT_SECONDS)

    def pack(self, project: Path, settings: PackSettings) -> Result[None, ProcessError]:
        args = [
            self._exe,
            "pack",
            str(project),
            "--configuration",
            settings.configuration,
            "--no-build",
            "--no-restore",
            "--output",
            str(settings.output_dir),
        ]
        if settings.include_symbols:
            args.append("--include-symbols")
        args += _version_props(settings.version, settings.assembly_version)
        args.append(f"-p:PackageVersion={settings.version}")
        if settings.release_notes:
            args.append(f"-p:PackageReleaseNotes={msbuild_escape(settings.release_notes)}")
        if settings.description:
            args.append(f"-p:Description={msbuild_escape(settings.description)}")
        if settings.project_url:
            args.append(f"-p:PackageProjectUrl={settings.project_url}")
        return self._runner.run(args, timeout=_BUILD_TIMEOUT_SECONDS)

    def push(self, package: Path, *, source: str, api_key: str) -> Result[None, ProcessError]:
        args = [
            self._exe,
            "nuget",
            "push",
            str(package),
            "--source",
            source,
            "--api-key",
            api_key,
            "--skip-duplicate",
        ]
        return self._runner.run(args, timeout=_BUILD_TIMEOUT_SECONDS)

    def tool_install(self, name: str) -> Result[None, ProcessError]:
        return self._runner.run([self._exe, "tool", "install", name, "--global"])
