"""Tests for the git, gitversion and docfx adapters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pbuild.core.result import Err, Ok
from pbuild.pipeline.errors import StepError
from pbuild.release.resolver import BranchContext
from pbuild.tools import DocFx, Git, GitVersion, RecordingRunner
from pbuild.tools.gitversion import parse_gitversion_output


class TestGit:
    def test_commit(self) -> None:
        runner = RecordingRunner()

        Git(runner).commit("Finalize CHANGELOG.md for 1.0.0.")

        assert runner.lines == ["git commit -m Finalize CHANGELOG.md for 1.0.0."]

    def test_signed_commit(self) -> None:
        runner = RecordingRunner()

        Git(runner).commit("msg", sign=True)

        assert runner.lines == ["git commit -S -m msg"]

    def test_tag(self) -> None:
        runner = RecordingRunner()

        Git(runner).tag("1.0.0")
        Git(runner).tag("1.0.1", force=False)

        assert runner.lines == ["git tag -f 1.0.0", "git tag 1.0.1"]

    def test_add(self, tmp_path: Path) -> None:
        runner = RecordingRunner()

        Git(runner).add(tmp_path / "CHANGELOG.md")

        assert runner.commands[0].args == ("git", "add", str(tmp_path / "CHANGELOG.md"))

    def test_current_branch(self) -> None:
        runner = RecordingRunner(outputs={"git rev-parse --abbrev-ref HEAD": "main\n"})
        assert Git(runner).current_branch() == Ok("main")


class TestParseGitVersion:
    def test_valid(self) -> None:
        text = json.dumps(
            {
                "Major": 2,
                "BranchName": "feature/x",
                "SemVer": "2.3.0-beta.4",
                "MajorMinorPatch": "2.3.0",
            }
        )

        assert parse_gitversion_output(text) == Ok(
            BranchContext(branch="feature/x", semver="2.3.0-beta.4", major_minor_patch="2.3.0")
        )

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "[]",
            '{"BranchName": "main", "SemVer": "1.0.0"}',
            '{"BranchName": "", "SemVer": "1.0.0", "MajorMinorPatch": "1.0.0"}',
        ],
    )
    def test_invalid(self, text: str) -> None:
        result = parse_gitversion_output(text)

        assert isinstance(result, Err)
        assert isinstance(result.error, StepError)

    def test_branch_context_queries_tool(self) -> None:
        payload = '{"BranchName": "main", "SemVer": "1.1.0-alpha.1", "MajorMinorPatch": "1.1.0"}'
        runner = RecordingRunner(outputs={"dotnet-gitversion": payload})

        result = GitVersion(runner).branch_context()

        assert result == Ok(BranchContext("main", "1.1.0-alpha.1", "1.1.0"))
        assert runner.lines == ["dotnet-gitversion /output json"]


class TestDocFx:
    def test_serve(self, tmp_path: Path) -> None:
        runner = RecordingRunner()
        config = tmp_path / "docs" / "docfx.json"

        DocFx(runner).serve(config)

        assert runner.commands[0].args == ("docfx", str(config), "--serve")
        assert runner.commands[0].cwd == config.parent
