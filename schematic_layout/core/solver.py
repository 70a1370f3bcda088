"""Bounded-iteration solver abstraction.

A solver is a small state machine advanced one unit of work at a time
through ``step()``.  It may hand work to a nested solver by setting
``active_sub_solver``; while one is set, ``step()`` advances the nested
solver instead of calling ``_step()``.

Kinds:
  Every concrete solver declares a ``kind`` from the closed
  ``SolverKind`` enum so orchestration and logging can dispatch on
  the variant without inspecting classes.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any

from schematic_layout.pipeline.config import LAYOUT_RULES

from .clock import Clock, PerfCounterClock
from .errors import LayoutError, IterationBudgetExceeded, DelegatedFailure
from .graphics import empty_graphics


log = logging.getLogger(__name__)


class SolverKind(Enum):
    PIPELINE = auto()
    CHIP_PARTITIONS = auto()
    IDENTIFY_DECOUPLING_CAPS = auto()
    PARTITION_PIN_RANGE_MATCH = auto()
    PIN_RANGE_MATCH = auto()
    SINGLE_PIN_RANGE_LAYOUT = auto()
    PIN_RANGE_LAYOUT = auto()
    SINGLE_INNER_PARTITION_PACKING = auto()
    PACK_INNER_PARTITIONS = auto()
    PIN_RANGE_OVERLAP = auto()
    PARTITION_PACKING = auto()
    PACK = auto()
    CUSTOM = auto()


class BaseSolver:
    """Common state and stepping logic for every solver.

    Subclasses implement ``_step()`` (one unit of their own work) and
    ``_visualize()``.  They may override ``_on_sub_solver_solved`` to
    absorb a finished sub-solver's result and ``_on_sub_solver_failed``
    to decorate the propagated error.
    """

    kind: SolverKind = SolverKind.CUSTOM

    def __init__(
        self,
        *,
        max_iterations: int | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.iterations = 0
        self.max_iterations = (
            max_iterations if max_iterations is not None
            else LAYOUT_RULES.solver_max_iterations
        )
        self.solved = False
        self.failed = False
        self.error: str | None = None
        self.failure: LayoutError | None = None
        self.active_sub_solver: BaseSolver | None = None
        self.clock: Clock = clock or PerfCounterClock()
        self.time_to_solve: float | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    # ── Stepping ────────────────────────────────────────────────────

    def step(self) -> None:
        """Perform exactly one unit of work (no-op once terminal)."""
        if self.solved or self.failed:
            return
        self.iterations += 1

        try:
            sub = self.active_sub_solver
            if sub is not None:
                sub.step()
                if sub.failed:
                    self.active_sub_solver = None
                    self._on_sub_solver_failed(sub)
                elif sub.solved:
                    self.active_sub_solver = None
                    self._on_sub_solver_solved(sub)
            else:
                self._step()
        except LayoutError as exc:
            self._fail(exc)
            return

        if not self.solved and not self.failed \
                and self.iterations >= self.max_iterations:
            self._fail(IterationBudgetExceeded(self.name, self.max_iterations))

    def solve(self) -> None:
        """Step until solved, failed or out of iterations."""
        start = self.clock.now()
        while not self.solved and not self.failed:
            self.step()
        self.time_to_solve = self.clock.now() - start

    def _step(self) -> None:
        raise NotImplementedError

    def _fail(self, exc: LayoutError) -> None:
        self.failed = True
        self.failure = exc
        self.error = exc.message
        log.debug("%s failed: %s", self.name, exc.message)

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        pass

    def _on_sub_solver_failed(self, sub: BaseSolver) -> None:
        self._fail(DelegatedFailure(sub.error or f"{sub.name} failed"))

    # ── Observation ────────────────────────────────────────────────

    @property
    def progress(self) -> float:
        """Fraction of work done, in [0, 1]."""
        return 1.0 if self.solved else 0.0

    def visualize(self) -> dict:
        """Complete graphics projection of the current state."""
        if self.active_sub_solver is not None:
            return self.active_sub_solver.visualize()
        return self._visualize()

    def preview(self) -> dict:
        """Cheaper, possibly partial projection for streaming progress."""
        if self.active_sub_solver is not None:
            return self.active_sub_solver.preview()
        return self._preview()

    def _visualize(self) -> dict:
        return empty_graphics()

    def _preview(self) -> dict:
        return self._visualize()

    def get_constructor_params(self) -> dict[str, Any]:
        """Data needed to rebuild this solver from scratch."""
        return {}
