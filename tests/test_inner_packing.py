"""Tests for inner-partition packing and symmetric groups."""

from __future__ import annotations

import unittest

from schematic_layout.pipeline.layout.geometry import bounds_overlap
from schematic_layout.pipeline.problem import parse_problem
from schematic_layout.solvers import (
    IdentifyDecouplingCapsSolver, PackInnerPartitionsSolver,
    SingleInnerPartitionPackingSolver, partition_problem,
)
from schematic_layout.solvers.inner_packing import (
    component_signature, detect_symmetric_groups, optimal_grid_dimensions,
)
from schematic_layout.solvers.pack_inputs import layout_boxes
from tests.fixtures import four_pin_chip, mcu_with_decaps, two_unconnected_chips


def decap_groups(problem):
    solver = IdentifyDecouplingCapsSolver(problem)
    solver.solve()
    return solver.output_decoupling_cap_groups


class TestSymmetricGroups(unittest.TestCase):

    def test_signature(self):
        problem = two_unconnected_chips()
        self.assertEqual(component_signature(problem, "U1"),
                         "pins:4_size:1x1_nets:1_rot:any")

    def test_identical_chips_form_a_group(self):
        groups = detect_symmetric_groups(two_unconnected_chips())
        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].chip_ids, ["U1", "U2"])
        self.assertEqual(groups[0].priority, 20)

    def test_decap_groups_come_first(self):
        problem = mcu_with_decaps()
        groups = detect_symmetric_groups(problem, decap_groups(problem))
        self.assertEqual(groups[0].group_id, "decap_group_U1__GND__VDD")
        self.assertEqual(groups[0].chip_ids, ["C1", "C2", "C3", "C4"])
        self.assertEqual(len(groups), 1)

    def test_grid_dimensions(self):
        self.assertEqual(optimal_grid_dimensions(2), (2, 1))
        self.assertEqual(optimal_grid_dimensions(4), (2, 2))
        cols, rows = optimal_grid_dimensions(10)
        self.assertGreaterEqual(cols * rows, 10)


class TestPacking(unittest.TestCase):

    def assert_no_overlap(self, problem, layout):
        boxes = list(layout_boxes(problem, layout).values())
        for i, a in enumerate(boxes):
            for b in boxes[i + 1:]:
                self.assertFalse(bounds_overlap(a, b))

    def test_partition_is_packed_without_overlap(self):
        problem = mcu_with_decaps()
        partition = partition_problem(problem)[0]
        solver = SingleInnerPartitionPackingSolver(partition, decap_groups(problem))
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertEqual(set(solver.layout.chip_placements), set(partition.chip_map))
        self.assert_no_overlap(partition, solver.layout)

    def test_symmetric_members_share_rotation(self):
        problem = mcu_with_decaps()
        partition = partition_problem(problem)[0]
        solver = SingleInnerPartitionPackingSolver(partition, decap_groups(problem))
        solver.solve()
        rotations = {
            solver.layout.chip_placements[c].ccw_rotation_degrees
            for c in ("C1", "C2", "C3", "C4")
        }
        self.assertEqual(rotations, {0})

    def test_groups_are_placed(self):
        problem = parse_problem({
            "chips": [four_pin_chip("A")],
            "groups": [{"group_id": "J1", "shapes": [[-1, -1, 1, 1]], "pins": []}],
        })
        solver = SingleInnerPartitionPackingSolver(problem)
        solver.solve()
        self.assertIn("J1", solver.layout.group_placements)
        self.assert_no_overlap(problem, solver.layout)

    def test_one_packed_partition_each(self):
        partitions = partition_problem(two_unconnected_chips())
        solver = PackInnerPartitionsSolver(partitions)
        solver.solve()
        self.assertTrue(solver.solved)
        self.assertEqual(len(solver.packed_partitions), 2)
        self.assertEqual(solver.progress, 1.0)


if __name__ == "__main__":
    unittest.main()
