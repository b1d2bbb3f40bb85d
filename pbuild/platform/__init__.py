"""Process and filesystem primitives used by tool adapters and targets."""

from .files import atomic_write_text, delete_directories, ensure_clean_directory, glob_directories
from .process import ProcessError, run, run_silent

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "delete_directories",
    "ensure_clean_directory",
    "glob_directories",
    "run",
    "run_silent",
]
