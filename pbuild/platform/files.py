"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

__all__ = ["atomic_write_text", "delete_directories", "ensure_clean_directory", "glob_directories"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def glob_directories(root: Path, patterns: Iterable[str]) -> list[Path]:
    """Return existing directories under root matching any glob pattern, deduplicated."""
    seen: set[Path] = set()
    out: list[Path] = []
    for pattern in patterns:
        for match in sorted(root.glob(pattern)):
            if match.is_dir() and match not in seen:
                seen.add(match)
                out.append(match)
    return out


def delete_directories(paths: Iterable[Path]) -> list[Path]:
    """Delete directories (missing ones are ignored). Returns what was removed."""
    removed: list[Path] = []
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
            removed.append(path)
    return removed


def ensure_clean_directory(path: Path) -> None:
    """Make path an existing, empty directory."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
