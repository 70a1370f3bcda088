"""Pipeline orchestrator: runs named phases, one solver per phase.

Pipeline flow:
  1. No active sub-solver and phases remain: build the phase's solver
     from the orchestrator's current state and record its start time.
  2. Active sub-solver: step it.  When it solves, record timing, run the
     phase's ``on_solved`` callback and advance.  When it fails, copy
     its error (prefixed with the phase name) and stop without
     advancing, so the failing phase stays inspectable.
  3. Past the last phase: mark the pipeline solved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from schematic_layout.pipeline.config import LAYOUT_RULES

from .clock import Clock
from .errors import DelegatedFailure
from .solver import BaseSolver, SolverKind


log = logging.getLogger(__name__)

P = TypeVar("P", bound="PipelineSolver")


@dataclass
class PipelineStep(Generic[P]):
    """One phase of a pipeline."""

    name: str
    solver_class: type[BaseSolver]
    get_constructor_params: Callable[[P], tuple]
    on_solved: Callable[[P], None] | None = None

    @property
    def kind(self) -> SolverKind:
        return self.solver_class.kind


@dataclass
class PhaseRecord:
    """A phase's solver together with its timing."""

    name: str
    kind: SolverKind
    solver: BaseSolver
    start_time: float
    first_iteration: int
    end_time: float | None = None
    elapsed: float = 0.0

    @property
    def solved(self) -> bool:
        return self.solver.solved

    @property
    def failed(self) -> bool:
        return self.solver.failed


class PipelineSolver(BaseSolver):
    """Generic phase-by-phase orchestrator.

    Subclasses provide ``pipeline_def`` (built in ``__init__`` after
    calling ``super().__init__``) and the state the phases read/write.
    """

    kind = SolverKind.PIPELINE

    def __init__(
        self,
        *,
        max_iterations: int | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(
            max_iterations=(
                max_iterations if max_iterations is not None
                else LAYOUT_RULES.pipeline_max_iterations
            ),
            clock=clock,
        )
        self.pipeline_def: list[PipelineStep] = []
        self.current_phase_index = 0
        self.phases: dict[str, PhaseRecord] = {}
        self.failed_phase: str | None = None

    # ── Stepping ────────────────────────────────────────────────────

    def _step(self) -> None:
        if self.current_phase_index >= len(self.pipeline_def):
            self.solved = True
            log.info("%s finished all %d phases in %d iterations",
                     self.name, len(self.pipeline_def), self.iterations)
            return

        step_def = self.pipeline_def[self.current_phase_index]
        params = step_def.get_constructor_params(self)
        solver = step_def.solver_class(*params)
        self.active_sub_solver = solver
        self.phases[step_def.name] = PhaseRecord(
            name=step_def.name,
            kind=step_def.kind,
            solver=solver,
            start_time=self.clock.now(),
            first_iteration=self.iterations,
        )
        log.info("Starting phase %s (%s)", step_def.name, step_def.kind.name)

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        step_def = self.pipeline_def[self.current_phase_index]
        record = self.phases[step_def.name]
        record.end_time = self.clock.now()
        record.elapsed = record.end_time - record.start_time
        if step_def.on_solved is not None:
            step_def.on_solved(self)
        log.info("Phase %s solved in %.1f ms (%d iterations)",
                 step_def.name, record.elapsed, sub.iterations)
        self.current_phase_index += 1

    def _on_sub_solver_failed(self, sub: BaseSolver) -> None:
        step_def = self.pipeline_def[self.current_phase_index]
        self.failed_phase = step_def.name
        self._fail(DelegatedFailure(
            f"{step_def.name}: {sub.error}", phase=step_def.name,
        ))
        log.warning("Phase %s failed: %s", step_def.name, sub.error)

    # ── Staged inspection ──────────────────────────────────────────

    def get_current_phase(self) -> str:
        if self.current_phase_index < len(self.pipeline_def):
            return self.pipeline_def[self.current_phase_index].name
        return "none"

    def solve_until_phase(self, phase: str) -> None:
        while (self.get_current_phase() != phase
               and not self.solved and not self.failed):
            self.step()

    def phase_solver(self, phase: str) -> BaseSolver | None:
        record = self.phases.get(phase)
        return record.solver if record is not None else None

    @property
    def time_spent_on_phase(self) -> dict[str, float]:
        return {name: rec.elapsed for name, rec in self.phases.items()}

    @property
    def progress(self) -> float:
        if self.solved:
            return 1.0
        if not self.pipeline_def:
            return 0.0
        done = self.current_phase_index
        sub = self.active_sub_solver
        partial = sub.progress if sub is not None else 0.0
        return min(1.0, (done + partial) / len(self.pipeline_def))

    def get_constructor_params(self) -> dict[str, Any]:
        return {"max_iterations": self.max_iterations}
