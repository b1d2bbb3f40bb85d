"""Tests for pbuild.pipeline.scheduler module."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from pbuild.core.result import Err, Ok, Result
from pbuild.core.workspace import Workspace
from pbuild.output.console import MockConsole, Style
from pbuild.pipeline.context import BuildContext
from pbuild.pipeline.errors import StepError, TargetExecutionError, UnknownTargetError
from pbuild.pipeline.graph import TargetRegistry
from pbuild.pipeline.scheduler import Scheduler, TargetState
from pbuild.tools import RecordingRunner, Toolset


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def ctx(tmp_path: Path, console: MockConsole) -> BuildContext:
    return BuildContext(
        workspace=Workspace(root=tmp_path),
        console=console,
        tools=Toolset.over(RecordingRunner()),
    )


class Recorder:
    """Target bodies that log their calls into a shared list."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.failing: set[str] = set()

    def body(self, name: str) -> Callable[[BuildContext], Result[None, object]]:
        def run(ctx: BuildContext) -> Result[None, object]:
            self.calls.append(name)
            if name in self.failing:
                return Err(StepError(f"{name} broke", hint="look closer"))
            return Ok(None)

        return run


def _pipeline(recorder: Recorder) -> TargetRegistry:
    registry = TargetRegistry()
    registry.register("Restore", recorder.body("Restore"))
    registry.register("Compile", recorder.body("Compile"), depends_on=["Restore"])
    registry.register("Test", recorder.body("Test"), depends_on=["Compile"])
    registry.register("Pack", recorder.body("Pack"), depends_on=["Compile", "Test"])
    return registry


class TestRun:
    def test_runs_plan_in_order(self, ctx: BuildContext) -> None:
        recorder = Recorder()
        scheduler = Scheduler(_pipeline(recorder), ctx)

        result = scheduler.run("Pack")

        assert isinstance(result, Ok)
        assert recorder.calls == ["Restore", "Compile", "Test", "Pack"]
        assert result.value.order == ("Restore", "Compile", "Test", "Pack")
        assert result.value.succeeded
        assert all(o.state == TargetState.COMPLETED for o in result.value.outcomes)

    def test_headers_and_summary(self, ctx: BuildContext, console: MockConsole) -> None:
        recorder = Recorder()

        Scheduler(_pipeline(recorder), ctx).run("Compile")

        assert console.headers == ["Restore", "Compile"]
        assert console.find("Build succeeded")
        assert not console.has_error()

    def test_plan_does_not_execute(self, ctx: BuildContext) -> None:
        recorder = Recorder()

        result = Scheduler(_pipeline(recorder), ctx).plan("Pack")

        assert result == Ok(("Restore", "Compile", "Test", "Pack"))
        assert recorder.calls == []

    def test_unknown_target_runs_nothing(self, ctx: BuildContext) -> None:
        recorder = Recorder()
        scheduler = Scheduler(_pipeline(recorder), ctx)

        result = scheduler.run("Deploy")

        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownTargetError)
        assert recorder.calls == []
        assert scheduler.last_report is None

    def test_durations_use_clock(self, ctx: BuildContext) -> None:
        ticks = iter([0.0, 1.5, 10.0, 12.0])
        recorder = Recorder()
        registry = TargetRegistry()
        registry.register("A", recorder.body("A"))
        registry.register("B", recorder.body("B"), depends_on=["A"])

        result = Scheduler(registry, ctx, clock=lambda: next(ticks)).run("B")

        assert isinstance(result, Ok)
        assert [o.duration for o in result.value.outcomes] == [1.5, 2.0]


class TestConditions:
    def test_false_condition_skips_body(self, ctx: BuildContext, console: MockConsole) -> None:
        recorder = Recorder()
        registry = _pipeline(recorder)
        registry.register(
            "Publish",
            recorder.body("Publish"),
            depends_on=["Pack"],
            only_when=lambda c: c.environment.api_key is not None,
        )

        result = Scheduler(registry, ctx).run("Publish")

        assert isinstance(result, Ok)
        assert "Publish" not in recorder.calls
        assert result.value.state("Publish") == TargetState.SKIPPED
        assert result.value.succeeded
        skipped = console.find("Publish: skipped")
        assert skipped and skipped[0].style == Style.DIM

    def test_skipped_target_still_satisfies_dependents(self, ctx: BuildContext) -> None:
        recorder = Recorder()
        registry = TargetRegistry()
        registry.register("Gate", recorder.body("Gate"), only_when=lambda c: False)
        registry.register("After", recorder.body("After"), depends_on=["Gate"])

        result = Scheduler(registry, ctx).run("After")

        assert isinstance(result, Ok)
        assert recorder.calls == ["After"]
        assert result.value.executed == ("After",)

    def test_condition_sees_context(self, ctx: BuildContext) -> None:
        seen: list[BuildContext] = []
        registry = TargetRegistry()
        registry.register("A", lambda c: Ok(None), only_when=lambda c: seen.append(c) is None)

        Scheduler(registry, ctx).run("A")

        assert seen == [ctx]


class TestFailure:
    def test_failure_stops_run(self, ctx: BuildContext, console: MockConsole) -> None:
        recorder = Recorder()
        recorder.failing.add("Compile")
        scheduler = Scheduler(_pipeline(recorder), ctx)

        result = scheduler.run("Pack")

        assert isinstance(result, Err)
        assert isinstance(result.error, TargetExecutionError)
        assert result.error.target == "Compile"
        assert result.error.cause == StepError("Compile broke", hint="look closer")
        assert recorder.calls == ["Restore", "Compile"]

        report = scheduler.last_report
        assert report is not None
        assert report.state("Restore") == TargetState.COMPLETED
        assert report.state("Compile") == TargetState.FAILED
        assert report.state("Test") == TargetState.NOT_STARTED
        assert report.state("Pack") == TargetState.NOT_STARTED
        assert not report.succeeded
        assert console.find("Build failed")

    def test_error_message_names_target(self, ctx: BuildContext, console: MockConsole) -> None:
        recorder = Recorder()
        recorder.failing.add("Test")

        Scheduler(_pipeline(recorder), ctx).run("Pack")

        assert console.find("Test: Test broke (hint: look closer)")

    def test_rerun_starts_fresh(self, ctx: BuildContext) -> None:
        recorder = Recorder()
        recorder.failing.add("Test")
        scheduler = Scheduler(_pipeline(recorder), ctx)

        assert isinstance(scheduler.run("Pack"), Err)
        recorder.failing.clear()
        recorder.calls.clear()
        second = scheduler.run("Pack")

        assert isinstance(second, Ok)
        assert recorder.calls == ["Restore", "Compile", "Test", "Pack"]
        assert second.value.state("Test") == TargetState.COMPLETED

    def test_state_of_unplanned_target(self, ctx: BuildContext) -> None:
        result = Scheduler(_pipeline(Recorder()), ctx).run("Restore")

        assert isinstance(result, Ok)
        with pytest.raises(KeyError):
            result.value.state("Pack")


class TestRaisingBody:
    @staticmethod
    def _registry(recorder: Recorder) -> TargetRegistry:
        def locked(ctx: BuildContext) -> Result[None, object]:
            raise PermissionError("TestResults is locked")

        registry = TargetRegistry()
        registry.register("A", recorder.body("A"))
        registry.register("B", locked, depends_on=["A"])
        registry.register("C", recorder.body("C"), depends_on=["B"])
        return registry

    def test_exception_fails_target(self, ctx: BuildContext, console: MockConsole) -> None:
        recorder = Recorder()
        scheduler = Scheduler(self._registry(recorder), ctx)

        result = scheduler.run("C")

        assert isinstance(result, Err)
        assert isinstance(result.error, TargetExecutionError)
        assert result.error.target == "B"
        assert isinstance(result.error.cause, PermissionError)
        assert recorder.calls == ["A"]

        report = scheduler.last_report
        assert report is not None
        assert report.state("A") == TargetState.COMPLETED
        assert report.state("B") == TargetState.FAILED
        assert report.state("C") == TargetState.NOT_STARTED
        assert console.find("B: PermissionError: TestResults is locked")
        assert console.find("Build failed")

    def test_report_replaces_previous_run(self, ctx: BuildContext) -> None:
        recorder = Recorder()
        scheduler = Scheduler(self._registry(recorder), ctx)

        assert isinstance(scheduler.run("A"), Ok)
        assert isinstance(scheduler.run("C"), Err)

        report = scheduler.last_report
        assert report is not None
        assert report.order == ("A", "B", "C")

    def test_keyboard_interrupt_propagates(self, ctx: BuildContext) -> None:
        def interrupted(ctx: BuildContext) -> Result[None, object]:
            raise KeyboardInterrupt

        registry = TargetRegistry()
        registry.register("A", interrupted)

        with pytest.raises(KeyboardInterrupt):
            Scheduler(registry, ctx).run("A")
