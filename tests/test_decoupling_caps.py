"""Tests for decoupling capacitor identification."""

from __future__ import annotations

import unittest

from schematic_layout.pipeline.problem import parse_problem
from schematic_layout.solvers import IdentifyDecouplingCapsSolver
from schematic_layout.solvers.decoupling_caps import find_main_chip_id
from tests.fixtures import four_pin_chip, mcu_with_decaps, two_pin_cap


def identify(problem):
    solver = IdentifyDecouplingCapsSolver(problem)
    solver.solve()
    return solver


class TestIdentify(unittest.TestCase):

    def test_groups_caps_by_main_chip_and_nets(self):
        solver = identify(mcu_with_decaps())
        self.assertTrue(solver.solved)
        groups = solver.output_decoupling_cap_groups
        self.assertEqual(len(groups), 1)
        group = groups[0]
        self.assertEqual(group.decoupling_cap_group_id, "decap_group_U1__GND__VDD")
        self.assertEqual(group.main_chip_id, "U1")
        self.assertEqual(group.net_pair, ("GND", "VDD"))
        self.assertEqual(group.decoupling_cap_chip_ids, ["C1", "C2", "C3", "C4"])

    def test_one_chip_per_step(self):
        problem = mcu_with_decaps()
        solver = IdentifyDecouplingCapsSolver(problem)
        solver.step()
        self.assertEqual(solver.last_chip.chip_id, "U1")
        self.assertFalse(solver.solved)
        solver.solve()
        # one step per chip plus the closing step
        self.assertEqual(solver.iterations, len(problem.chip_map) + 1)
        self.assertEqual(solver.progress, 1.0)

    def test_free_rotation_is_not_a_decap(self):
        cap = two_pin_cap("C1")
        del cap["available_rotations"]
        problem = parse_problem({
            "chips": [four_pin_chip("U1"), cap],
            "strong_connections": [["C1.1", "U1.p1"]],
            "net_connections": [["C1.1", "VDD"], ["C1.2", "GND"]],
        })
        self.assertEqual(identify(problem).output_decoupling_cap_groups, [])

    def test_single_net_is_not_a_decap(self):
        problem = parse_problem({
            "chips": [four_pin_chip("U1"), two_pin_cap("C1")],
            "strong_connections": [["C1.1", "U1.p1"]],
            "net_connections": [["C1.1", "VDD"], ["C1.2", "VDD"]],
        })
        self.assertEqual(identify(problem).output_decoupling_cap_groups, [])

    def test_unconnected_cap_is_not_a_decap(self):
        problem = parse_problem({
            "chips": [two_pin_cap("C1")],
            "net_connections": [["C1.1", "VDD"], ["C1.2", "GND"]],
        })
        self.assertEqual(identify(problem).output_decoupling_cap_groups, [])


class TestMainChip(unittest.TestCase):

    def test_ties_go_to_smallest_id(self):
        problem = parse_problem({
            "chips": [four_pin_chip("U2"), four_pin_chip("U1"), two_pin_cap("C1")],
            "strong_connections": [["C1.1", "U2.p1"], ["C1.2", "U1.p1"]],
        })
        cap = problem.chip_map["C1"]
        self.assertEqual(find_main_chip_id(problem, cap), "U1")

    def test_most_connections_wins(self):
        problem = parse_problem({
            "chips": [four_pin_chip("U1"), four_pin_chip("U2"), two_pin_cap("C1")],
            "strong_connections": [
                ["C1.1", "U2.p1"], ["C1.2", "U2.p2"], ["C1.2", "U1.p1"],
            ],
        })
        cap = problem.chip_map["C1"]
        self.assertEqual(find_main_chip_id(problem, cap), "U2")


if __name__ == "__main__":
    unittest.main()
