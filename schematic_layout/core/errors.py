"""Error kinds raised inside solvers.

Every error is terminal for the solver that hits it.  ``BaseSolver.step``
converts a raised ``LayoutError`` into ``failed = True`` plus the
``error`` string; nothing is retried.
"""

from __future__ import annotations


class LayoutError(Exception):
    """Base class for all layout failures."""

    def __init__(self, message: str, phase: str | None = None) -> None:
        self.message = message
        self.phase = phase
        super().__init__(message)


class StructuralError(LayoutError):
    """A chip/pin/net reference points to an entity that does not exist."""


class IterationBudgetExceeded(LayoutError):
    """A solver did not reach a terminal state within its step budget."""

    def __init__(self, solver_name: str, max_iterations: int) -> None:
        self.solver_name = solver_name
        self.max_iterations = max_iterations
        super().__init__(
            f"{solver_name} ran out of iterations "
            f"(max iterations exceeded: {max_iterations})"
        )


class DelegatedFailure(LayoutError):
    """A sub-solver failed; its message is carried up unchanged."""


class PackError(LayoutError):
    """The packer rejected its input."""
