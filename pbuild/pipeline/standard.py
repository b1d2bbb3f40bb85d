"""The standard .NET library pipeline.

    Clean ─┐(before)
    Restore ── Compile ──┬── CreateMetadata ── DocFx ── ServeDocs
                         │
            RunTests ────┴── CreatePackage ── Publish
            (after Compile)

    RunChangelog and Install stand alone.

Versions and release notes stamped onto binaries and packages always come
from the changelog's latest release section.
"""

from __future__ import annotations

from pathlib import Path

from pbuild.core.result import Err, Ok, Result
from pbuild.output.console import Style
from pbuild.pipeline.context import BuildContext
from pbuild.pipeline.errors import DuplicateTargetError, StepError
from pbuild.pipeline.graph import Target, TargetRegistry
from pbuild.platform.files import delete_directories, ensure_clean_directory, glob_directories
from pbuild.release.changelog import finalize, load_changelog, save_changelog, with_path
from pbuild.release.errors import ChangelogError
from pbuild.release.resolver import ResolvedVersion, resolve_release, select_prerelease_tag
from pbuild.release.semver import parse_semver
from pbuild.tools.dotnet import PackSettings

__all__ = ["register_standard_targets", "standard_registry"]


def _release(ctx: BuildContext) -> Result[ResolvedVersion, ChangelogError]:
    path = ctx.workspace.changelog_path
    document = load_changelog(path)
    if isinstance(document, Err):
        return document
    resolved = resolve_release(
        document.value,
        prerelease=ctx.prerelease,
        repository_url=ctx.config.project.repository_url,
    )
    return with_path(resolved, path)


def _assembly_version(version: str) -> str:
    parsed = parse_semver(version)
    return parsed.major_minor_patch if parsed is not None else version


def _is_build_output(path: Path) -> bool:
    return any(part in ("bin", "obj") for part in path.parts)


# -----------------------------------------------------------------------------
# Bodies
# -----------------------------------------------------------------------------


def clean(ctx: BuildContext) -> Result[None, object]:
    ws = ctx.workspace
    source = ws.config.paths.source
    dirs = glob_directories(ws.root, (f"{source}/**/bin", f"{source}/**/obj"))
    dirs += [ws.output_dir, ws.test_results_dir, ws.perf_results_dir, ws.docs_site_dir]

    if ctx.dry_run:
        for path in dirs:
            ctx.console.print(f"delete {path}", Style.DIM)
        return Ok(None)

    try:
        removed = delete_directories(dirs)
        ensure_clean_directory(ws.output_dir)
    except OSError as e:
        return Err(StepError(f"failed to clean outputs: {e}"))

    noun = "directory" if len(removed) == 1 else "directories"
    ctx.console.print(f"removed {len(removed)} {noun}", Style.DIM)
    return Ok(None)


def restore(ctx: BuildContext) -> Result[None, object]:
    return ctx.tools.dotnet.restore(ctx.workspace.solution_path)


def compile_solution(ctx: BuildContext) -> Result[None, object]:
    release = _release(ctx)
    if isinstance(release, Err):
        return release
    version = release.value.version
    ctx.console.info(f"Version {version}")
    return ctx.tools.dotnet.build(
        ctx.workspace.solution_path,
        configuration=ctx.configuration,
        version=version,
        assembly_version=_assembly_version(version),
    )


def run_tests(ctx: BuildContext) -> Result[None, object]:
    ws = ctx.workspace
    projects = [p for p in sorted(ws.root.glob("**/*.Tests.csproj")) if not _is_build_output(p)]
    if not projects:
        ctx.console.warning("no *.Tests projects found")
        return Ok(None)

    for project in projects:
        ctx.console.info(f"Running tests from {project.stem}")
        result = ctx.tools.dotnet.test(
            project,
            configuration=ctx.configuration,
            results_dir=ws.test_results_dir,
        )
        if isinstance(result, Err):
            return result
    return Ok(None)


def _packable_projects(ctx: BuildContext) -> list[Path]:
    return [
        p
        for p in sorted(ctx.workspace.source_dir.glob("**/*.csproj"))
        if "Test" not in p.stem and "_build" not in p.stem and not _is_build_output(p)
    ]


def create_package(ctx: BuildContext) -> Result[None, object]:
    release = _release(ctx)
    if isinstance(release, Err):
        return release

    projects = _packable_projects(ctx)
    if not projects:
        return Err(
            StepError(
                f"no packable projects under {ctx.workspace.source_dir}",
                hint="projects whose name contains 'Test' or '_build' are excluded",
            )
        )

    project_cfg = ctx.config.project
    settings = PackSettings(
        configuration=ctx.configuration,
        version=release.value.version,
        assembly_version=_assembly_version(release.value.version),
        output_dir=ctx.workspace.packages_dir,
        release_notes=release.value.notes or None,
        description=project_cfg.description,
        project_url=project_cfg.project_url or project_cfg.repository_url,
    )
    for project in projects:
        result = ctx.tools.dotnet.pack(project, settings)
        if isinstance(result, Err):
            return result
    return Ok(None)


def _can_publish(ctx: BuildContext) -> bool:
    return ctx.environment.api_key is not None


def publish(ctx: BuildContext) -> Result[None, object]:
    api_key = ctx.environment.api_key
    if api_key is None:
        return Err(StepError("no API key", hint="set NUGET_API_KEY"))

    packages = [
        p
        for p in sorted(ctx.workspace.packages_dir.glob("*.nupkg"))
        if not p.name.endswith(".symbols.nupkg")
    ]
    if not packages and not ctx.dry_run:
        return Err(StepError(f"no packages in {ctx.workspace.packages_dir}"))

    for package in packages:
        result = ctx.tools.dotnet.push(package, source=ctx.feed_source, api_key=api_key)
        if isinstance(result, Err):
            return result
    return Ok(None)


def run_changelog(ctx: BuildContext) -> Result[None, object]:
    """Finalize the unreleased changelog section, commit it and tag the release."""
    branch = ctx.tools.gitversion.branch_context()
    if isinstance(branch, Err):
        return branch

    vnext = select_prerelease_tag(branch.value, ctx.config.release.stable_branches)
    version = parse_semver(vnext)
    if version is None:
        return Err(StepError(f"computed version '{vnext}' is not a semantic version"))

    path = ctx.workspace.changelog_path
    document = load_changelog(path)
    if isinstance(document, Err):
        return document
    finalized = with_path(
        finalize(
            document.value,
            version,
            ctx.today(),
            repository_url=ctx.config.project.repository_url,
        ),
        path,
    )
    if isinstance(finalized, Err):
        return finalized

    if ctx.dry_run:
        ctx.console.print(f"finalize {path.name} for {vnext}", Style.DIM)
    else:
        saved = save_changelog(path, finalized.value)
        if isinstance(saved, Err):
            return saved

    git = ctx.tools.git
    added = git.add(path)
    if isinstance(added, Err):
        return added
    committed = git.commit(f"Finalize {path.name} for {vnext}.")
    if isinstance(committed, Err):
        return committed
    return git.tag(vnext)


def create_metadata(ctx: BuildContext) -> Result[None, object]:
    return ctx.tools.docfx.metadata(ctx.workspace.docfx_config_path)


def build_docs(ctx: BuildContext) -> Result[None, object]:
    return ctx.tools.docfx.build(ctx.workspace.docfx_config_path)


def serve_docs(ctx: BuildContext) -> Result[None, object]:
    return ctx.tools.docfx.serve(ctx.workspace.docfx_config_path)


def _has_global_tools(ctx: BuildContext) -> bool:
    return bool(ctx.config.global_tools)


def install(ctx: BuildContext) -> Result[None, object]:
    for tool in ctx.config.global_tools:
        result = ctx.tools.dotnet.tool_install(tool)
        if isinstance(result, Err):
            return result
    return Ok(None)


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------


STANDARD_TARGETS: tuple[Target, ...] = (
    Target("Clean", clean, before=("Restore",), description="Delete build outputs"),
    Target("Restore", restore, description="Restore package dependencies"),
    Target(
        "Compile",
        compile_solution,
        depends_on=("Restore",),
        description="Build the solution with the changelog version",
    ),
    Target("RunTests", run_tests, after=("Compile",), description="Run *.Tests projects"),
    Target(
        "CreatePackage",
        create_package,
        depends_on=("Compile", "RunTests"),
        description="Pack library projects with version and release notes",
    ),
    Target(
        "Publish",
        publish,
        depends_on=("CreatePackage",),
        only_when=_can_publish,
        description="Push packages to the feed (needs NUGET_API_KEY)",
    ),
    Target(
        "RunChangelog",
        run_changelog,
        description="Finalize the changelog for the branch version, commit and tag",
    ),
    Target(
        "CreateMetadata",
        create_metadata,
        depends_on=("Compile",),
        description="Generate API metadata for the docs",
    ),
    Target("DocFx", build_docs, depends_on=("CreateMetadata",), description="Build the docs site"),
    Target("ServeDocs", serve_docs, depends_on=("DocFx",), description="Serve the docs site"),
    Target(
        "Install",
        install,
        only_when=_has_global_tools,
        description="Install the configured global dotnet tools",
    ),
)


def register_standard_targets(registry: TargetRegistry) -> Result[None, DuplicateTargetError]:
    for target in STANDARD_TARGETS:
        added = registry.add(target)
        if isinstance(added, Err):
            return added
    return Ok(None)


def standard_registry() -> TargetRegistry:
    registry = TargetRegistry()
    registered = register_standard_targets(registry)
    assert isinstance(registered, Ok)
    return registry
