"""Target registry and execution-order resolution.

Targets are registered once, by direct calls, before anything runs. Planning
a request walks only hard ``depends_on`` edges to find what must run, then
orders that set:

- hard edges are mandatory, and a cycle among them is an error;
- ``before``/``after`` hints only order targets already in the set, and a
  hint that would contradict the hard edges (or earlier hints) is dropped;
- remaining ties go to declaration order, so the same registry always yields
  the same plan.
"""

from __future__ import annotations

import heapq
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pbuild.core.result import Err, Ok, Result
from pbuild.pipeline.errors import (
    CyclicDependencyError,
    DuplicateTargetError,
    GraphError,
    UnknownTargetError,
)

if TYPE_CHECKING:
    from pbuild.pipeline.context import BuildContext

__all__ = ["Condition", "Target", "TargetBody", "TargetRegistry"]

type TargetBody = Callable[[BuildContext], Result[None, object]]
type Condition = Callable[[BuildContext], bool]


@dataclass(frozen=True, slots=True)
class Target:
    """A named build step and its ordering constraints.

    Attributes:
        depends_on: Targets that must complete first; they are always
            scheduled along with this one.
        before: Targets this one should precede when both are scheduled.
        after: Targets this one should follow when both are scheduled.
        only_when: Predicate evaluated right before execution; False skips
            the body but still satisfies dependents.
    """

    name: str
    body: TargetBody
    depends_on: tuple[str, ...] = ()
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()
    only_when: Condition | None = None
    description: str = ""


class TargetRegistry:
    def __init__(self) -> None:
        self._targets: dict[str, Target] = {}

    def register(
        self,
        name: str,
        body: TargetBody,
        *,
        depends_on: Iterable[str] = (),
        before: Iterable[str] = (),
        after: Iterable[str] = (),
        only_when: Condition | None = None,
        description: str = "",
    ) -> Result[Target, DuplicateTargetError]:
        return self.add(
            Target(
                name=name,
                body=body,
                depends_on=tuple(depends_on),
                before=tuple(before),
                after=tuple(after),
                only_when=only_when,
                description=description,
            )
        )

    def add(self, target: Target) -> Result[Target, DuplicateTargetError]:
        if target.name in self._targets:
            return Err(DuplicateTargetError(name=target.name))
        self._targets[target.name] = target
        return Ok(target)

    def get(self, name: str) -> Target | None:
        return self._targets.get(name)

    def names(self) -> tuple[str, ...]:
        """Target names in declaration order."""
        return tuple(self._targets)

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def _unknown(self, name: str, required_by: str | None = None) -> UnknownTargetError:
        return UnknownTargetError(name=name, available=self.names(), required_by=required_by)

    def closure(self, requested: Iterable[str]) -> Result[tuple[str, ...], UnknownTargetError]:
        """Requested targets plus everything they transitively depend on."""
        found: set[str] = set()
        stack: list[str] = []
        for name in requested:
            if name not in self._targets:
                return Err(self._unknown(name))
            stack.append(name)

        while stack:
            name = stack.pop()
            if name in found:
                continue
            found.add(name)
            for dep in self._targets[name].depends_on:
                if dep not in self._targets:
                    return Err(self._unknown(dep, required_by=name))
                stack.append(dep)

        return Ok(tuple(n for n in self._targets if n in found))

    def _find_cycle(self, names: tuple[str, ...]) -> CyclicDependencyError | None:
        scope = set(names)
        done: set[str] = set()
        path: list[str] = []
        on_path: set[str] = set()

        def visit(name: str) -> CyclicDependencyError | None:
            path.append(name)
            on_path.add(name)
            for dep in self._targets[name].depends_on:
                if dep not in scope or dep in done:
                    continue
                if dep in on_path:
                    start = path.index(dep)
                    return CyclicDependencyError(cycle=(*path[start:], dep))
                found = visit(dep)
                if found is not None:
                    return found
            path.pop()
            on_path.discard(name)
            done.add(name)
            return None

        for name in names:
            if name not in done:
                found = visit(name)
                if found is not None:
                    return found
        return None

    def validate(self) -> Result[None, GraphError]:
        """Check every registered target: unknown dependencies, then hard cycles."""
        for target in self._targets.values():
            for dep in target.depends_on:
                if dep not in self._targets:
                    return Err(self._unknown(dep, required_by=target.name))
        cycle = self._find_cycle(self.names())
        if cycle is not None:
            return Err(cycle)
        return Ok(None)

    def resolve_order(self, *requested: str) -> Result[tuple[str, ...], GraphError]:
        """Execution order for the requested targets and their dependencies."""
        closure = self.closure(requested)
        if isinstance(closure, Err):
            return closure
        names = closure.value

        cycle = self._find_cycle(names)
        if cycle is not None:
            return Err(cycle)

        scope = set(names)
        succ: dict[str, set[str]] = {n: set() for n in names}
        for name in names:
            for dep in self._targets[name].depends_on:
                succ[dep].add(name)

        for first, then in self._soft_edges(names, scope):
            if then in succ[first] or first == then:
                continue
            if _reaches(succ, then, first):
                continue
            succ[first].add(then)

        return Ok(_stable_topological_order(names, succ))

    def _soft_edges(self, names: tuple[str, ...], scope: set[str]) -> list[tuple[str, str]]:
        edges: list[tuple[str, str]] = []
        for name in names:
            target = self._targets[name]
            edges.extend((other, name) for other in target.after if other in scope)
            edges.extend((name, other) for other in target.before if other in scope)
        return edges


def _reaches(succ: dict[str, set[str]], start: str, goal: str) -> bool:
    seen: set[str] = set()
    stack = [start]
    while stack:
        node = stack.pop()
        if node == goal:
            return True
        if node in seen:
            continue
        seen.add(node)
        stack.extend(succ[node])
    return False


def _stable_topological_order(
    names: tuple[str, ...], succ: dict[str, set[str]]
) -> tuple[str, ...]:
    rank = {name: i for i, name in enumerate(names)}
    indegree = {name: 0 for name in names}
    for targets in succ.values():
        for name in targets:
            indegree[name] += 1

    ready = [(rank[n], n) for n in names if indegree[n] == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        _, name = heapq.heappop(ready)
        order.append(name)
        for nxt in succ[name]:
            indegree[nxt] -= 1
            if indegree[nxt] == 0:
                heapq.heappush(ready, (rank[nxt], nxt))
    return tuple(order)
