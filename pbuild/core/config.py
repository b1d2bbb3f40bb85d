"""Typed loading of ``pbuild.toml``.

The file lives at the workspace root and doubles as the workspace marker.
Every key is optional; missing tables and keys fall back to defaults.

    [project]
    solution = "src/App.sln"
    changelog = "CHANGELOG.md"
    default_target = "CreatePackage"
    repository_url = "https://github.com/owner/app"

    [release]
    stable_branches = ["main", "master"]

    [feed]
    source = "https://api.nuget.org/v3/index.json"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "DocsConfig",
    "PathsConfig",
    "ProjectConfig",
    "ReleaseConfig",
    "DEFAULT_FEED_SOURCE",
    "DEFAULT_STABLE_BRANCHES",
    "load_config",
]

DEFAULT_STABLE_BRANCHES: tuple[str, ...] = ("main", "master")
DEFAULT_FEED_SOURCE = "https://resharper-plugins.jetbrains.com/api/v2/package"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    solution: str | None = None
    changelog: str = "CHANGELOG.md"
    default_target: str = "CreatePackage"
    repository_url: str | None = None
    description: str | None = None
    project_url: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Branches whose builds are versioned without a prerelease suffix."""

    stable_branches: tuple[str, ...] = DEFAULT_STABLE_BRANCHES


@dataclass(frozen=True, slots=True)
class DocsConfig:
    docfx: str = "docs/docfx.json"


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Relative paths within the workspace."""

    source: str = "src"
    output: str = "bin"
    tests: str = "TestResults"
    perf_tests: str = "PerfResults"
    docs_site: str = "docs/_site"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    feed_source: str = DEFAULT_FEED_SOURCE
    global_tools: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        project: StrDict = get_table(data, "project") or {}
        release: StrDict = get_table(data, "release") or {}
        feed: StrDict = get_table(data, "feed") or {}
        docs: StrDict = get_table(data, "docs") or {}
        paths: StrDict = get_table(data, "paths") or {}
        tools: StrDict = get_table(data, "tools") or {}

        defaults = PathsConfig()
        return cls(
            project=ProjectConfig(
                solution=get_str(project, "solution"),
                changelog=get_str(project, "changelog") or "CHANGELOG.md",
                default_target=get_str(project, "default_target") or "CreatePackage",
                repository_url=_strip_slash(get_str(project, "repository_url")),
                description=get_str(project, "description"),
                project_url=get_str(project, "project_url"),
            ),
            release=ReleaseConfig(
                stable_branches=get_str_list(release, "stable_branches")
                or DEFAULT_STABLE_BRANCHES,
            ),
            docs=DocsConfig(docfx=get_str(docs, "docfx") or "docs/docfx.json"),
            paths=PathsConfig(
                source=get_str(paths, "source") or defaults.source,
                output=get_str(paths, "output") or defaults.output,
                tests=get_str(paths, "tests") or defaults.tests,
                perf_tests=get_str(paths, "perf_tests") or defaults.perf_tests,
                docs_site=get_str(paths, "docs_site") or defaults.docs_site,
            ),
            feed_source=get_str(feed, "source") or DEFAULT_FEED_SOURCE,
            global_tools=get_str_list(tools, "global") or (),
        )


def _strip_slash(url: str | None) -> str | None:
    if url is None:
        return None
    return url.rstrip("/")


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse ``pbuild.toml``.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
