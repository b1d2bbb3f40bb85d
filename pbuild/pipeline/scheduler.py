"""Sequential target execution.

``Scheduler.run`` plans the request, then executes each target once in plan
order. Execution stops at the first failing body; targets after it stay
``not_started``. A body that raises counts as failing, with the exception as
the cause. Each call starts from fresh state, so a run can be repeated in the
same process.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from pbuild.core.result import Err, Ok, Result
from pbuild.output.console import Style
from pbuild.pipeline.errors import GraphError, TargetExecutionError, describe_cause
from pbuild.pipeline.graph import TargetRegistry

if TYPE_CHECKING:
    from pbuild.pipeline.context import BuildContext

__all__ = ["RunReport", "Scheduler", "TargetOutcome", "TargetState"]


class TargetState(StrEnum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TargetOutcome:
    name: str
    state: TargetState
    duration: float = 0.0


@dataclass(frozen=True, slots=True)
class RunReport:
    order: tuple[str, ...]
    outcomes: tuple[TargetOutcome, ...]

    def state(self, name: str) -> TargetState:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome.state
        raise KeyError(name)

    @property
    def executed(self) -> tuple[str, ...]:
        """Targets whose body ran, successfully or not."""
        return tuple(
            o.name
            for o in self.outcomes
            if o.state in (TargetState.COMPLETED, TargetState.FAILED)
        )

    @property
    def succeeded(self) -> bool:
        return all(o.state in (TargetState.COMPLETED, TargetState.SKIPPED) for o in self.outcomes)


class Scheduler:
    def __init__(
        self,
        registry: TargetRegistry,
        context: BuildContext,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._ctx = context
        self._clock = clock
        self._last_report: RunReport | None = None

    @property
    def last_report(self) -> RunReport | None:
        """Report of the most recent ``run`` that got past planning."""
        return self._last_report

    def plan(self, *requested: str) -> Result[tuple[str, ...], GraphError]:
        return self._registry.resolve_order(*requested)

    def run(self, *requested: str) -> Result[RunReport, GraphError | TargetExecutionError]:
        planned = self.plan(*requested)
        if isinstance(planned, Err):
            return planned
        order = planned.value

        console = self._ctx.console
        states = {name: TargetState.NOT_STARTED for name in order}
        durations = {name: 0.0 for name in order}
        failure: TargetExecutionError | None = None

        for name in order:
            target = self._registry.get(name)
            assert target is not None

            if target.only_when is not None and not target.only_when(self._ctx):
                states[name] = TargetState.SKIPPED
                console.print(f"{name}: skipped (condition not met)", Style.DIM)
                continue

            console.header(name)
            states[name] = TargetState.RUNNING
            started = self._clock()
            try:
                result = target.body(self._ctx)
            except Exception as exc:
                # A crashing body fails its target the same way an Err does.
                result = Err(exc)
            durations[name] = self._clock() - started

            if isinstance(result, Err):
                states[name] = TargetState.FAILED
                failure = TargetExecutionError(target=name, cause=result.error)
                console.error(f"{name}: {describe_cause(result.error)}")
                break
            states[name] = TargetState.COMPLETED

        report = RunReport(
            order=order,
            outcomes=tuple(TargetOutcome(n, states[n], durations[n]) for n in order),
        )
        self._last_report = report
        self._print_summary(report)

        if failure is not None:
            return Err(failure)
        return Ok(report)

    def _print_summary(self, report: RunReport) -> None:
        console = self._ctx.console
        width = max((len(n) for n in report.order), default=6) + 2
        console.newline()
        console.print(f"{'Target'.ljust(width)}{'Status'.ljust(13)}Duration", Style.BOLD)
        total = 0.0
        for outcome in report.outcomes:
            total += outcome.duration
            duration = _format_duration(outcome.duration) if outcome.duration else ""
            style = _STATE_STYLES[outcome.state]
            console.print(
                f"{outcome.name.ljust(width)}{str(outcome.state).ljust(13)}{duration}".rstrip(),
                style,
            )
        console.print(f"{'Total'.ljust(width)}{''.ljust(13)}{_format_duration(total)}", Style.BOLD)

        if report.succeeded:
            console.success("Build succeeded")
        else:
            console.error("Build failed")


_STATE_STYLES = {
    TargetState.NOT_STARTED: Style.DIM,
    TargetState.RUNNING: Style.WARNING,
    TargetState.COMPLETED: Style.SUCCESS,
    TargetState.SKIPPED: Style.DIM,
    TargetState.FAILED: Style.ERROR,
}


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}:{secs:02d}"
