"""Tests for pbuild.core.workspace module."""

from __future__ import annotations

from pathlib import Path

import pytest

from pbuild.core.config import Config, PathsConfig, ProjectConfig
from pbuild.core.result import Err, Ok
from pbuild.core.workspace import Workspace, detect_workspace, find_workspace_upward


def _make_workspace(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "pbuild.toml").write_text("", encoding="utf-8")
    return root


class TestWorkspacePaths:
    def test_defaults(self, tmp_path: Path) -> None:
        ws = Workspace(root=tmp_path)
        assert ws.changelog_path == tmp_path / "CHANGELOG.md"
        assert ws.packages_dir == tmp_path / "bin" / "nuget"
        assert ws.test_results_dir == tmp_path / "TestResults"
        assert ws.docfx_config_path == tmp_path / "docs" / "docfx.json"
        assert ws.solution_path is None

    def test_paths_follow_config(self, tmp_path: Path) -> None:
        config = Config(
            project=ProjectConfig(solution="App.sln", changelog="CHANGES.md"),
            paths=PathsConfig(output="out"),
        )
        ws = Workspace(root=tmp_path).with_config(config)
        assert ws.solution_path == tmp_path / "App.sln"
        assert ws.changelog_path == tmp_path / "CHANGES.md"
        assert ws.packages_dir == tmp_path / "out" / "nuget"


class TestDetection:
    def test_find_upward(self, tmp_path: Path) -> None:
        root = _make_workspace(tmp_path / "repo")
        nested = root / "src" / "Lib"
        nested.mkdir(parents=True)

        assert find_workspace_upward(nested) == root

    def test_detect_from_start_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WORKSPACE_ROOT", raising=False)
        root = _make_workspace(tmp_path / "repo")
        sub = root / "sub"
        sub.mkdir()

        result = detect_workspace(start_dir=sub)

        assert isinstance(result, Ok)
        assert result.value.root == root.resolve()

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        root = _make_workspace(tmp_path / "repo")
        monkeypatch.setenv("WORKSPACE_ROOT", str(root))

        result = detect_workspace(start_dir=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.root == root.resolve()

    def test_env_override_invalid(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WORKSPACE_ROOT", str(tmp_path))

        result = detect_workspace()

        assert isinstance(result, Err)
        assert "pbuild.toml" in result.error.message

    def test_not_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WORKSPACE_ROOT", raising=False)

        result = detect_workspace(start_dir=tmp_path)

        assert isinstance(result, Err)
        assert result.error.searched_from == tmp_path.resolve()
