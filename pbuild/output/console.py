"""Console output abstraction.

Pipeline code writes through ``ConsoleProtocol`` and never touches Rich
directly. ``RichConsole`` renders to the terminal; ``MockConsole`` keeps every
line in memory so tests can assert on what a build reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # external commands, hints
    BOLD = auto()
    HEADER = auto()  # target banners

    def __str__(self) -> str:
        return self.name.lower()


_RICH_STYLES: dict[Style, str] = {
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.BOLD: "bold",
    Style.HEADER: "blue bold",
}

# Label put in front of status messages. Plain text; Rich colours it.
_LABELS: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}


class ConsoleProtocol(Protocol):
    """What the scheduler, targets and commands print through."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Open the output block of one executed target."""
        ...

    def newline(self) -> None: ...


class _LabelledConsole:
    """Routes the labelled status methods through ``_status``."""

    def _status(self, style: Style, message: str) -> None:
        raise NotImplementedError

    def success(self, message: str) -> None:
        self._status(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._status(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._status(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._status(Style.INFO, message)


class RichConsole(_LabelledConsole):
    """Terminal backend.

    Messages are printed as literal text: command lines and changelog
    headings contain ``[brackets]`` that Rich would otherwise eat as markup.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=_RICH_STYLES.get(style), markup=False)

    def _status(self, style: Style, message: str) -> None:
        from rich.text import Text

        line = Text(_LABELS[style], style=_RICH_STYLES[style])
        line.append(f" {message}")
        self._console.print(line)

    def header(self, message: str) -> None:
        from rich.rule import Rule
        from rich.text import Text

        self._console.print()
        self._console.print(Rule(Text(message), style=_RICH_STYLES[Style.HEADER], align="left"))

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    message: str
    style: Style


def _no_records() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole(_LabelledConsole):
    """In-memory backend for tests."""

    outputs: list[OutputRecord] = field(default_factory=_no_records)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def _status(self, style: Style, message: str) -> None:
        self.print(f"{_LABELS[style]} {message}", style)

    def header(self, message: str) -> None:
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self.print("")

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    @property
    def headers(self) -> list[str]:
        return [r.message for r in self.outputs if r.style is Style.HEADER]

    def has_error(self) -> bool:
        return any(r.style is Style.ERROR for r in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Records whose message contains ``substring``."""
        return [r for r in self.outputs if substring in r.message]
