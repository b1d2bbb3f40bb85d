"""Tests for pbuild.pipeline.context module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pbuild.core.config import Config, ProjectConfig
from pbuild.core.result import Err, Ok
from pbuild.core.workspace import Workspace
from pbuild.output.console import MockConsole
from pbuild.pipeline.context import BuildContext, BuildEnvironment, read_environment
from pbuild.tools import RecordingRunner, Toolset


class TestReadEnvironment:
    def test_local_defaults(self) -> None:
        assert read_environment({}) == Ok(BuildEnvironment())

    @pytest.mark.parametrize("var", ["CI", "GITHUB_ACTIONS", "TF_BUILD", "JENKINS_URL"])
    def test_server_build_markers(self, var: str) -> None:
        result = read_environment({var: "true"})

        assert isinstance(result, Ok)
        assert result.value.is_server_build
        assert result.value.default_configuration == "Release"

    @pytest.mark.parametrize("value", ["", "0", "false"])
    def test_falsy_marker(self, value: str) -> None:
        result = read_environment({"CI": value})

        assert isinstance(result, Ok)
        assert not result.value.is_server_build
        assert result.value.default_configuration == "Debug"

    def test_run_number(self) -> None:
        payload = json.dumps({"run_number": "42", "event_name": "push"})

        result = read_environment({"GITHUB_CONTEXT": payload})

        assert isinstance(result, Ok)
        assert result.value.run_number == 42

    def test_run_number_missing_key(self) -> None:
        result = read_environment({"GITHUB_CONTEXT": "{}"})
        assert isinstance(result, Ok)
        assert result.value.run_number == 0

    @pytest.mark.parametrize("payload", ["{not json", "[1, 2]", '{"run_number": "abc"}'])
    def test_invalid_context(self, payload: str) -> None:
        result = read_environment({"GITHUB_CONTEXT": payload})

        assert isinstance(result, Err)
        assert "GITHUB_CONTEXT" in result.error.message

    def test_api_key(self) -> None:
        result = read_environment({"NUGET_API_KEY": " secret "})

        assert isinstance(result, Ok)
        assert result.value.api_key == "secret"

    def test_blank_api_key(self) -> None:
        result = read_environment({"NUGET_API_KEY": "  "})
        assert isinstance(result, Ok)
        assert result.value.api_key is None


class TestBuildContext:
    def _ctx(self, root: Path, config: Config, source: str | None = None) -> BuildContext:
        return BuildContext(
            workspace=Workspace(root=root, config=config),
            console=MockConsole(),
            tools=Toolset.over(RecordingRunner()),
            source=source,
        )

    def test_feed_source_defaults_to_config(self, tmp_path: Path) -> None:
        config = Config(feed_source="https://feed.example/v3")
        assert self._ctx(tmp_path, config).feed_source == "https://feed.example/v3"

    def test_source_override(self, tmp_path: Path) -> None:
        ctx = self._ctx(tmp_path, Config(), source="https://other.example")
        assert ctx.feed_source == "https://other.example"

    def test_config_passthrough(self, tmp_path: Path) -> None:
        config = Config(project=ProjectConfig(solution="App.sln"))
        ctx = self._ctx(tmp_path, config)
        assert ctx.config is config
        assert ctx.run_number == 0
        assert ctx.configuration == "Debug"
