"""Import layering of the pbuild package.

Lower layers (core, platform, release) never reach up into the build
machinery, and nothing outside the CLI imports it or typer. Rich stays behind
the console and subprocess behind the process module.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

import pytest


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def pbuild_root() -> Path:
    return Path(__file__).resolve().parents[2]


def iter_source_files(base: Path) -> list[Path]:
    root = pbuild_root()
    files: list[Path] = []
    for path in sorted(base.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def parse_imports(path: Path) -> list[ImportRef]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    imports: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend(ImportRef(alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module is not None and not node.level:
            imports.append(ImportRef(node.module, node.lineno))
    return imports


def matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


def _offenders(package: str, forbidden: tuple[str, ...]) -> list[str]:
    root = pbuild_root()
    out: list[str] = []
    for path in iter_source_files(root / package):
        for item in parse_imports(path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                out.append(f"{path.relative_to(root)}:{item.line}: imports '{item.module}'")
    return out


@pytest.mark.parametrize(
    ("package", "forbidden"),
    [
        ("core", ("pbuild.platform", "pbuild.release", "pbuild.pipeline", "pbuild.tools")),
        ("platform", ("pbuild.release", "pbuild.pipeline", "pbuild.tools", "pbuild.output")),
        ("release", ("pbuild.pipeline", "pbuild.tools", "pbuild.output")),
        ("pipeline", ("pbuild.cli",)),
        ("tools", ("pbuild.cli",)),
        ("output", ("pbuild.cli",)),
    ],
)
def test_layer_does_not_import_upward(package: str, forbidden: tuple[str, ...]) -> None:
    offenders = _offenders(package, forbidden + ("typer",))
    assert not offenders, "layering violations:\n" + "\n".join(offenders)


def test_rich_only_in_console() -> None:
    root = pbuild_root()
    offenders = [
        f"{path.relative_to(root)}:{item.line}"
        for path in iter_source_files(root)
        for item in parse_imports(path)
        if matches_prefix(item.module, "rich") and path != root / "output" / "console.py"
    ]
    assert not offenders, "direct rich imports:\n" + "\n".join(offenders)


def test_subprocess_only_in_process_module() -> None:
    root = pbuild_root()
    offenders = [
        f"{path.relative_to(root)}:{item.line}"
        for path in iter_source_files(root)
        for item in parse_imports(path)
        if item.module == "subprocess" and path != root / "platform" / "process.py"
    ]
    assert not offenders, "direct subprocess imports:\n" + "\n".join(offenders)
