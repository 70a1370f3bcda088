"""Shared problem builders for the test suite.

  two_unconnected_chips  Two 4-pin chips with no strong links.
  chain_problem          A - B - C wired pin to pin.
  literal_pair_problem   Two chips, one strong link "A.p1" <-> "B.p1".
  mcu_with_decaps        A 12-pin chip with four 2-pin decoupling caps.
"""

from __future__ import annotations

from schematic_layout.pipeline.problem import parse_problem


class ManualClock:
    """Deterministic clock: advances only when told to."""

    def __init__(self, start: float = 0.0, tick: float = 0.0) -> None:
        self.current = start
        self.tick = tick

    def now(self) -> float:
        value = self.current
        self.current += self.tick
        return value

    def advance(self, ms: float) -> None:
        self.current += ms


def four_pin_chip(chip_id: str, size=(1.0, 1.0), rotations=None) -> dict:
    hw, hh = size[0] / 2, size[1] / 2
    chip = {
        "chip_id": chip_id,
        "size": list(size),
        "pins": [
            {"pin_id": f"{chip_id}.p1", "offset": [-hw, 0.0], "side": "x-"},
            {"pin_id": f"{chip_id}.p2", "offset": [hw, 0.0], "side": "x+"},
            {"pin_id": f"{chip_id}.p3", "offset": [0.0, hh], "side": "y+"},
            {"pin_id": f"{chip_id}.p4", "offset": [0.0, -hh], "side": "y-"},
        ],
    }
    if rotations is not None:
        chip["available_rotations"] = list(rotations)
    return chip


def two_pin_cap(chip_id: str) -> dict:
    return {
        "chip_id": chip_id,
        "size": [0.5, 1.0],
        "available_rotations": [0, 180],
        "pins": [
            {"pin_id": f"{chip_id}.1", "offset": [0.0, 0.5], "side": "y+"},
            {"pin_id": f"{chip_id}.2", "offset": [0.0, -0.5], "side": "y-"},
        ],
    }


def two_unconnected_chips():
    return parse_problem({
        "chips": [four_pin_chip("U1"), four_pin_chip("U2")],
        "nets": ["GND"],
        "net_connections": [["U1.p4", "GND"], ["U2.p4", "GND"]],
    })


def chain_problem():
    return parse_problem({
        "chips": [four_pin_chip("A"), four_pin_chip("B"), four_pin_chip("C")],
        "strong_connections": [["A.p2", "B.p1"], ["B.p2", "C.p1"]],
    })


def literal_pair_problem():
    return parse_problem({
        "chips": [four_pin_chip("A"), four_pin_chip("B")],
        "strong_connections": [["A.p1", "B.p1"]],
    })


def mcu_with_decaps():
    """U1 has six pins down each side; C1..C4 decouple VDD/GND."""
    pins = []
    for i in range(6):
        y = 1.25 - i * 0.5
        pins.append({"pin_id": f"U1.L{i}", "offset": [-1.5, y], "side": "x-"})
        pins.append({"pin_id": f"U1.R{i}", "offset": [1.5, y], "side": "x+"})
    caps = [two_pin_cap(f"C{i}") for i in range(1, 5)]
    strong = [[f"C{i}.1", f"U1.L{i}"] for i in range(1, 5)]
    weak = []
    for i in range(1, 5):
        weak.append([f"C{i}.1", "VDD"])
        weak.append([f"C{i}.2", "GND"])
    return parse_problem({
        "chips": [
            {"chip_id": "U1", "size": [3.0, 3.0], "pins": pins},
            *caps,
        ],
        "nets": ["VDD", "GND"],
        "strong_connections": strong,
        "net_connections": weak,
    })
