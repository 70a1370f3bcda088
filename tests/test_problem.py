"""Tests for problem parsing, serialization and validation."""

from __future__ import annotations

import json
import unittest

from schematic_layout.core import StructuralError
from schematic_layout.pipeline.problem import (
    InputProblem, Chip, ChipPin, parse_problem, problem_to_dict,
    validate_problem, normalize_side,
)
from tests.fixtures import four_pin_chip, mcu_with_decaps


class TestParse(unittest.TestCase):

    def test_strong_connections_are_symmetric(self):
        problem = parse_problem({
            "chips": [four_pin_chip("A"), four_pin_chip("B")],
            "strong_connections": [["A.p1", "B.p1"]],
        })
        self.assertTrue(problem.pin_strong_conn_map[("A.p1", "B.p1")])
        self.assertTrue(problem.pin_strong_conn_map[("B.p1", "A.p1")])
        self.assertTrue(problem.is_strongly_connected("B.p1", "A.p1"))
        self.assertFalse(problem.is_strongly_connected("A.p1", "A.p2"))

    def test_pin_ownership(self):
        problem = parse_problem({"chips": [four_pin_chip("U1")]})
        self.assertEqual(problem.owner_chip("U1.p3"), "U1")
        self.assertIsNone(problem.owner_chip("nope"))
        self.assertEqual(problem.chip_map["U1"].pin_ids,
                         ("U1.p1", "U1.p2", "U1.p3", "U1.p4"))

    def test_side_aliases(self):
        self.assertEqual(normalize_side("left"), "x-")
        self.assertEqual(normalize_side("top"), "y+")
        self.assertEqual(normalize_side("y-"), "y-")
        with self.assertRaises(StructuralError):
            normalize_side("diagonal")

    def test_offsets_accept_xy_dicts(self):
        problem = parse_problem({"chips": [{
            "chip_id": "U1", "size": {"x": 2, "y": 1},
            "pins": [{"pin_id": "U1.1", "offset": {"x": -1, "y": 0}, "side": "left"}],
        }]})
        self.assertEqual(problem.chip_map["U1"].size, (2.0, 1.0))
        self.assertEqual(problem.chip_pin_map["U1.1"].offset, (-1.0, 0.0))

    def test_rotations_default_to_free(self):
        problem = parse_problem({"chips": [four_pin_chip("U1")]})
        chip = problem.chip_map["U1"]
        self.assertIsNone(chip.available_rotations)
        self.assertEqual(chip.rotations, (0, 90, 180, 270))

    def test_defaults(self):
        problem = parse_problem({})
        self.assertEqual(problem.chip_gap, 0.2)
        self.assertEqual(problem.partition_gap, 2.0)
        self.assertFalse(problem.has_strong_connections())

    def test_input_dicts_are_copied(self):
        chip_map = {"U1": Chip("U1", (), (1.0, 1.0))}
        problem = InputProblem(chip_map=chip_map, chip_pin_map={})
        chip_map["U2"] = Chip("U2", (), (1.0, 1.0))
        self.assertEqual(list(problem.chip_map), ["U1"])


class TestSerialize(unittest.TestCase):

    def test_json_round_trip(self):
        problem = mcu_with_decaps()
        data = json.loads(json.dumps(problem_to_dict(problem)))
        again = parse_problem(data)
        self.assertEqual(dict(again.chip_map), dict(problem.chip_map))
        self.assertEqual(dict(again.pin_strong_conn_map),
                         dict(problem.pin_strong_conn_map))
        self.assertEqual(dict(again.net_conn_map), dict(problem.net_conn_map))

    def test_strong_pairs_emitted_once(self):
        data = problem_to_dict(mcu_with_decaps())
        self.assertEqual(len(data["strong_connections"]), 4)


class TestValidate(unittest.TestCase):

    def test_valid_problem(self):
        self.assertEqual(validate_problem(mcu_with_decaps()), [])

    def test_unknown_pin_and_net(self):
        problem = parse_problem({
            "chips": [four_pin_chip("A")],
            "strong_connections": [["A.p1", "GHOST.1"]],
            "net_connections": [["A.p2", "VCC"]],
        })
        errors = validate_problem(problem)
        self.assertTrue(any("GHOST.1" in e for e in errors))
        self.assertTrue(any("unknown net 'VCC'" in e for e in errors))

    def test_missing_reverse_entry(self):
        problem = InputProblem(
            chip_map={"A": Chip("A", ("A.1", "A.2"), (1.0, 1.0))},
            chip_pin_map={
                "A.1": ChipPin("A.1", (-0.5, 0.0), "x-"),
                "A.2": ChipPin("A.2", (0.5, 0.0), "x+"),
            },
            pin_strong_conn_map={("A.1", "A.2"): True},
        )
        errors = validate_problem(problem)
        self.assertEqual(len(errors), 1)
        self.assertIn("reverse", errors[0])

    def test_bad_chip_definition(self):
        problem = parse_problem({"chips": [
            {"chip_id": "U1", "size": [0, 1], "available_rotations": [45], "pins": []},
        ]})
        errors = validate_problem(problem)
        self.assertEqual(len(errors), 2)

    def test_pin_owned_twice(self):
        problem = InputProblem(
            chip_map={
                "A": Chip("A", ("P",), (1.0, 1.0)),
                "B": Chip("B", ("P",), (1.0, 1.0)),
            },
            chip_pin_map={"P": ChipPin("P", (0.0, 0.0), "x-")},
        )
        self.assertTrue(any("owned by both" in e for e in validate_problem(problem)))
        self.assertEqual(problem.owner_chip("P"), "A")


if __name__ == "__main__":
    unittest.main()
