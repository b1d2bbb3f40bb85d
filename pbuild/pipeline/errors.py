"""Error payloads of target registration, planning and execution."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "CyclicDependencyError",
    "DuplicateTargetError",
    "GraphError",
    "StepError",
    "TargetExecutionError",
    "UnknownTargetError",
    "describe_cause",
]


@dataclass(frozen=True, slots=True)
class DuplicateTargetError:
    name: str

    def pretty(self) -> str:
        return f"target '{self.name}' is registered twice"


@dataclass(frozen=True, slots=True)
class CyclicDependencyError:
    """Hard dependencies form a cycle; ``cycle`` starts and ends on the same name."""

    cycle: tuple[str, ...]

    def pretty(self) -> str:
        return "dependency cycle: " + " -> ".join(self.cycle)


@dataclass(frozen=True, slots=True)
class UnknownTargetError:
    name: str
    available: tuple[str, ...] = ()
    required_by: str | None = None

    def pretty(self) -> str:
        if self.required_by is not None:
            return f"target '{self.required_by}' depends on unknown target '{self.name}'"
        return f"unknown target '{self.name}'"


GraphError = DuplicateTargetError | CyclicDependencyError | UnknownTargetError


@dataclass(frozen=True, slots=True)
class StepError:
    """Failure reported by a target body that has no more specific payload."""

    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class TargetExecutionError:
    """The first failing target of a run and what it failed on."""

    target: str
    cause: object

    def pretty(self) -> str:
        return f"target '{self.target}' failed: {describe_cause(self.cause)}"


def describe_cause(cause: object) -> str:
    """Render an error payload or exception as one line."""
    if isinstance(cause, Exception):
        detail = str(cause)
        return f"{type(cause).__name__}: {detail}" if detail else type(cause).__name__
    pretty = getattr(cause, "pretty", None)
    if callable(pretty):
        return str(pretty())
    message = getattr(cause, "message", None)
    if isinstance(message, str):
        return message
    return str(cause)
