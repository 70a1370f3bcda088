"""Tests for the bounded-iteration solver abstraction.

Validates:
  - step() counts every call and is a no-op once terminal
  - the iteration cap fails a solver after exactly max_iterations steps
  - raised LayoutErrors become failures
  - sub-solver results and failures propagate to the parent
"""

from __future__ import annotations

import unittest

from schematic_layout.core import (
    BaseSolver, SolverKind, LayoutError, StructuralError,
)
from tests.fixtures import ManualClock


class CountingSolver(BaseSolver):
    """Solves after *steps_needed* calls to _step()."""

    def __init__(self, steps_needed: int = 3, **kwargs) -> None:
        super().__init__(**kwargs)
        self.steps_needed = steps_needed
        self.calls = 0

    def _step(self) -> None:
        self.calls += 1
        if self.calls >= self.steps_needed:
            self.solved = True


class NeverFinishes(BaseSolver):
    def _step(self) -> None:
        pass


class Explodes(BaseSolver):
    def _step(self) -> None:
        raise StructuralError("pin 'X.1' has no owner")


class Parent(BaseSolver):
    """Delegates to *child*, then finishes on its own next step."""

    def __init__(self, child: BaseSolver, **kwargs) -> None:
        super().__init__(**kwargs)
        self.child = child
        self.started = False
        self.absorbed = None

    def _step(self) -> None:
        if not self.started:
            self.started = True
            self.active_sub_solver = self.child
            return
        self.solved = True

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        self.absorbed = sub


class TestStepping(unittest.TestCase):

    def test_solve_counts_iterations(self):
        solver = CountingSolver(steps_needed=4)
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertFalse(solver.failed)
        self.assertEqual(solver.iterations, 4)

    def test_step_is_noop_when_terminal(self):
        solver = CountingSolver(steps_needed=1)
        solver.step()
        self.assertTrue(solver.solved)
        solver.step()
        solver.step()
        self.assertEqual(solver.iterations, 1)
        self.assertEqual(solver.calls, 1)

    def test_default_kind_is_custom(self):
        self.assertIs(CountingSolver().kind, SolverKind.CUSTOM)

    def test_progress_before_and_after(self):
        solver = CountingSolver(steps_needed=2)
        self.assertEqual(solver.progress, 0.0)
        solver.solve()
        self.assertEqual(solver.progress, 1.0)

    def test_time_to_solve_uses_clock(self):
        clock = ManualClock(start=100.0, tick=5.0)
        solver = CountingSolver(steps_needed=2, clock=clock)
        solver.solve()
        self.assertEqual(solver.time_to_solve, 5.0)


class TestIterationCap(unittest.TestCase):

    def test_fails_after_exactly_max_iterations(self):
        solver = NeverFinishes(max_iterations=7)
        for _ in range(6):
            solver.step()
            self.assertFalse(solver.failed)
        solver.step()
        self.assertTrue(solver.failed)
        self.assertEqual(solver.iterations, 7)
        self.assertIn("max iterations", solver.error)

    def test_solving_on_last_iteration_is_not_a_failure(self):
        solver = CountingSolver(steps_needed=5, max_iterations=5)
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertFalse(solver.failed)

    def test_solve_terminates_on_cap(self):
        solver = NeverFinishes(max_iterations=50)
        solver.solve()
        self.assertTrue(solver.failed)
        self.assertEqual(solver.iterations, 50)


class TestFailures(unittest.TestCase):

    def test_layout_error_becomes_failure(self):
        solver = Explodes()
        solver.step()
        self.assertTrue(solver.failed)
        self.assertFalse(solver.solved)
        self.assertEqual(solver.error, "pin 'X.1' has no owner")
        self.assertIsInstance(solver.failure, StructuralError)

    def test_non_layout_errors_propagate(self):
        class Broken(BaseSolver):
            def _step(self):
                raise KeyError("bug")

        with self.assertRaises(KeyError):
            Broken().step()

    def test_base_step_not_implemented(self):
        with self.assertRaises(NotImplementedError):
            BaseSolver().step()


class TestSubSolvers(unittest.TestCase):

    def test_sub_solver_result_is_absorbed(self):
        child = CountingSolver(steps_needed=3)
        parent = Parent(child)
        parent.solve()
        self.assertTrue(parent.solved)
        self.assertIs(parent.absorbed, child)
        # 1 delegate + 3 child steps + 1 finish
        self.assertEqual(parent.iterations, 5)
        self.assertIsNone(parent.active_sub_solver)

    def test_sub_solver_failure_propagates_verbatim(self):
        parent = Parent(Explodes())
        parent.solve()
        self.assertTrue(parent.failed)
        self.assertEqual(parent.error, "pin 'X.1' has no owner")
        self.assertIsInstance(parent.failure, LayoutError)

    def test_sub_solver_cap_failure_propagates(self):
        parent = Parent(NeverFinishes(max_iterations=3))
        parent.solve()
        self.assertTrue(parent.failed)
        self.assertIn("NeverFinishes", parent.error)

    def test_visualize_delegates_to_active_sub_solver(self):
        class Drawn(NeverFinishes):
            def _visualize(self):
                graphics = super()._visualize()
                graphics["texts"].append({"x": 0, "y": 0, "text": "child"})
                return graphics

        parent = Parent(Drawn())
        parent.step()
        self.assertEqual(parent.visualize()["texts"][0]["text"], "child")
        self.assertEqual(parent.preview()["texts"][0]["text"], "child")


if __name__ == "__main__":
    unittest.main()
