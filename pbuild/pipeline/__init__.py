"""Target graph and scheduler.

``pbuild.pipeline.context`` and ``pbuild.pipeline.standard`` pull in the tool
adapters and are imported explicitly by callers that need them.
"""

from .errors import (
    CyclicDependencyError,
    DuplicateTargetError,
    GraphError,
    StepError,
    TargetExecutionError,
    UnknownTargetError,
)
from .graph import Target, TargetRegistry
from .scheduler import RunReport, Scheduler, TargetOutcome, TargetState

__all__ = [
    "CyclicDependencyError",
    "DuplicateTargetError",
    "GraphError",
    "RunReport",
    "Scheduler",
    "StepError",
    "Target",
    "TargetExecutionError",
    "TargetOutcome",
    "TargetRegistry",
    "TargetState",
    "UnknownTargetError",
]
