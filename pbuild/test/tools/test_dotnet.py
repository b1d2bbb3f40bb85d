"""Tests for pbuild.tools.dotnet module."""

from __future__ import annotations

from pathlib import Path

from pbuild.core.result import Err, Ok
from pbuild.tools import DotNet, PackSettings, RecordingRunner
from pbuild.tools.dotnet import msbuild_escape


class TestMsbuildEscape:
    def test_plain_text_unchanged(self) -> None:
        assert msbuild_escape("Fix crash on start") == "Fix crash on start"

    def test_special_characters(self) -> None:
        assert msbuild_escape('a;b,c"d') == "a%3Bb%2Cc%22d"

    def test_percent_escaped_first(self) -> None:
        assert msbuild_escape("100%;") == "100%25%3B"

    def test_newlines(self) -> None:
        assert msbuild_escape("one\r\ntwo\nthree") == "one%0Atwo%0Athree"


class TestDotNet:
    def test_restore_without_solution(self) -> None:
        runner = RecordingRunner()

        assert DotNet(runner).restore(None) == Ok(None)

        assert runner.lines == ["dotnet restore"]

    def test_build_without_solution(self) -> None:
        runner = RecordingRunner()

        DotNet(runner).build(
            None, configuration="Release", version="2.0.0-rc.1", assembly_version="2.0.0"
        )

        assert runner.lines == [
            "dotnet build --configuration Release --no-restore "
            "-p:AssemblyVersion=2.0.0 -p:FileVersion=2.0.0 -p:Version=2.0.0-rc.1"
        ]

    def test_pack_minimal(self, tmp_path: Path) -> None:
        runner = RecordingRunner()
        settings = PackSettings(
            configuration="Release",
            version="1.0.0",
            assembly_version="1.0.0",
            output_dir=tmp_path / "out",
            include_symbols=False,
        )

        DotNet(runner).pack(tmp_path / "Lib.csproj", settings)

        [command] = runner.commands
        assert "--include-symbols" not in command.args
        assert not any(a.startswith("-p:PackageReleaseNotes") for a in command.args)
        assert command.args[-1] == "-p:PackageVersion=1.0.0"

    def test_pack_description_escaped(self, tmp_path: Path) -> None:
        runner = RecordingRunner()
        settings = PackSettings(
            configuration="Release",
            version="1.0.0",
            assembly_version="1.0.0",
            output_dir=tmp_path,
            description="Fast, small; tested",
        )

        DotNet(runner).pack(tmp_path / "Lib.csproj", settings)

        assert "-p:Description=Fast%2C small%3B tested" in runner.commands[0].args

    def test_custom_executable(self) -> None:
        runner = RecordingRunner()

        DotNet(runner, executable="/opt/dotnet/dotnet").tool_install("docfx")

        assert runner.lines == ["/opt/dotnet/dotnet tool install docfx --global"]

    def test_failure_propagates(self, tmp_path: Path) -> None:
        runner = RecordingRunner(failures={"dotnet nuget push": 409})

        result = DotNet(runner).push(tmp_path / "a.nupkg", source="https://feed", api_key="k")

        assert isinstance(result, Err)
        assert result.error.returncode == 409
