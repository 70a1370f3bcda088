"""Core: solver abstraction, pipeline orchestrator, errors and clock."""

from .clock import Clock, PerfCounterClock
from .errors import (
    LayoutError, StructuralError, IterationBudgetExceeded,
    DelegatedFailure, PackError,
)
from .solver import BaseSolver, SolverKind
from .orchestrator import PipelineSolver, PipelineStep, PhaseRecord

__all__ = [
    "Clock", "PerfCounterClock",
    "LayoutError", "StructuralError", "IterationBudgetExceeded",
    "DelegatedFailure", "PackError",
    "BaseSolver", "SolverKind",
    "PipelineSolver", "PipelineStep", "PhaseRecord",
]
