"""Tests for the phase-by-phase pipeline orchestrator."""

from __future__ import annotations

import unittest

from schematic_layout.core import (
    BaseSolver, PipelineSolver, PipelineStep, StructuralError,
)
from tests.fixtures import ManualClock


class TakesSteps(BaseSolver):
    def __init__(self, steps: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.steps = steps
        self.output = None

    def _step(self) -> None:
        self.steps -= 1
        if self.steps <= 0:
            self.output = "done"
            self.solved = True


class NeverFinishes(BaseSolver):
    def _step(self) -> None:
        pass


class Explodes(BaseSolver):
    def __init__(self, message: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.message = message

    def _step(self) -> None:
        raise StructuralError(self.message)


class ThreePhases(PipelineSolver):
    """first -> second -> third; the middle phase is configurable."""

    def __init__(self, middle=None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.seen: list[str] = []
        middle = middle or PipelineStep(
            "second", TakesSteps, lambda p: (3,),
            lambda p: p.seen.append("second"),
        )
        self.pipeline_def = [
            PipelineStep(
                "first", TakesSteps, lambda p: (2,),
                lambda p: p.seen.append("first"),
            ),
            middle,
            PipelineStep(
                "third", TakesSteps, lambda p: (1,),
                lambda p: p.seen.append("third"),
            ),
        ]


class TestPhaseOrdering(unittest.TestCase):

    def test_runs_every_phase_in_order(self):
        pipeline = ThreePhases()
        pipeline.solve()
        self.assertTrue(pipeline.solved)
        self.assertEqual(pipeline.seen, ["first", "second", "third"])
        self.assertEqual(list(pipeline.phases), ["first", "second", "third"])
        self.assertEqual(pipeline.get_current_phase(), "none")

    def test_phase_index_is_monotonic(self):
        pipeline = ThreePhases()
        last = 0
        while not pipeline.solved and not pipeline.failed:
            pipeline.step()
            self.assertGreaterEqual(pipeline.current_phase_index, last)
            last = pipeline.current_phase_index
        self.assertEqual(last, 3)

    def test_phase_solver_is_kept(self):
        pipeline = ThreePhases()
        pipeline.solve()
        self.assertEqual(pipeline.phase_solver("second").output, "done")
        self.assertIsNone(pipeline.phase_solver("missing"))

    def test_progress_reaches_one(self):
        pipeline = ThreePhases()
        self.assertEqual(pipeline.progress, 0.0)
        pipeline.solve_until_phase("second")
        self.assertGreater(pipeline.progress, 0.0)
        self.assertLess(pipeline.progress, 1.0)
        pipeline.solve()
        self.assertEqual(pipeline.progress, 1.0)


class TestSolveUntilPhase(unittest.TestCase):

    def test_stops_before_target_phase_runs(self):
        pipeline = ThreePhases()
        pipeline.solve_until_phase("second")
        self.assertEqual(pipeline.get_current_phase(), "second")
        self.assertEqual(pipeline.seen, ["first"])
        self.assertNotIn("second", pipeline.phases)

    def test_unknown_phase_runs_to_completion(self):
        pipeline = ThreePhases()
        pipeline.solve_until_phase("nope")
        self.assertTrue(pipeline.solved)

    def test_resume_after_staged_run(self):
        pipeline = ThreePhases()
        pipeline.solve_until_phase("third")
        pipeline.solve()
        self.assertEqual(pipeline.seen, ["first", "second", "third"])


class TestFailure(unittest.TestCase):

    def test_failure_prefixes_phase_name_and_stops(self):
        pipeline = ThreePhases(middle=PipelineStep(
            "second", Explodes, lambda p: ("chip 'U9' not found",),
        ))
        pipeline.solve()
        self.assertTrue(pipeline.failed)
        self.assertFalse(pipeline.solved)
        self.assertEqual(pipeline.error, "second: chip 'U9' not found")
        self.assertEqual(pipeline.failed_phase, "second")
        self.assertEqual(pipeline.failure.phase, "second")
        # The failing phase stays current and inspectable.
        self.assertEqual(pipeline.get_current_phase(), "second")
        self.assertTrue(pipeline.phases["second"].failed)
        self.assertNotIn("third", pipeline.phases)
        self.assertEqual(pipeline.seen, ["first"])

    def test_pipeline_cap_with_never_finishing_phase(self):
        pipeline = ThreePhases(
            middle=PipelineStep("second", NeverFinishes, lambda p: ()),
            max_iterations=25,
        )
        pipeline.solve()
        self.assertTrue(pipeline.failed)
        self.assertEqual(pipeline.iterations, 25)
        self.assertIn("max iterations", pipeline.error)
        self.assertIsNone(pipeline.failed_phase)

    def test_phase_cap_failure_is_attributed(self):
        class Capped(NeverFinishes):
            def __init__(self, **kwargs):
                super().__init__(max_iterations=4, **kwargs)

        pipeline = ThreePhases(middle=PipelineStep("second", Capped, lambda p: ()))
        pipeline.solve()
        self.assertTrue(pipeline.failed)
        self.assertEqual(pipeline.failed_phase, "second")
        self.assertTrue(pipeline.error.startswith("second: Capped ran out"))


class TestTiming(unittest.TestCase):

    def test_phase_timing_uses_injected_clock(self):
        clock = ManualClock(start=0.0, tick=1.0)
        pipeline = ThreePhases(clock=clock)
        pipeline.solve()
        spent = pipeline.time_spent_on_phase
        self.assertEqual(set(spent), {"first", "second", "third"})
        for name, record in pipeline.phases.items():
            self.assertIsNotNone(record.end_time)
            self.assertEqual(spent[name], record.end_time - record.start_time)
            self.assertGreater(spent[name], 0.0)

    def test_phase_records_first_iteration(self):
        pipeline = ThreePhases()
        pipeline.solve()
        firsts = [r.first_iteration for r in pipeline.phases.values()]
        self.assertEqual(firsts, sorted(firsts))
        self.assertEqual(firsts[0], 1)


if __name__ == "__main__":
    unittest.main()
