"""Problem parsing: convert raw dicts/JSON into an InputProblem."""

from __future__ import annotations

from schematic_layout.core.errors import StructuralError
from .models import (
    SIDES, Side, ChipPin, Chip, GroupPin, Group, Net, InputProblem,
)


_SIDE_ALIASES = {
    "left": "x-",
    "right": "x+",
    "top": "y+",
    "bottom": "y-",
}


def normalize_side(label: str) -> Side:
    """Map a side label (``x-`` or ``left`` style) to the canonical form."""
    if label in SIDES:
        return label
    side = _SIDE_ALIASES.get(label)
    if side is None:
        raise StructuralError(f"Unknown pin side '{label}'")
    return side


def parse_problem(data: dict) -> InputProblem:
    """Parse a raw dict (from JSON) into an InputProblem.

    Format:
        {
          "chips": [{"chip_id": "U1", "size": [w, h],
                     "available_rotations": [0, 180],
                     "pins": [{"pin_id": "U1.1", "offset": [x, y],
                               "side": "x-"}]}],
          "groups": [{"group_id": "G1", "shapes": [[x0, y0, x1, y1]],
                      "pins": [{"pin_id": "G1.1", "offset": [x, y]}]}],
          "nets": [{"net_id": "GND"}],
          "strong_connections": [["U1.1", "R1.1"]],
          "net_connections": [["U1.2", "GND"]],
          "chip_gap": 0.2,
          "partition_gap": 2
        }

    Strong connections are listed once per pair and stored in both
    directions.
    """
    chip_map: dict[str, Chip] = {}
    chip_pin_map: dict[str, ChipPin] = {}
    for c in data.get("chips", []):
        pins = c.get("pins", [])
        for p in pins:
            chip_pin_map[p["pin_id"]] = ChipPin(
                pin_id=p["pin_id"],
                offset=_point(p["offset"]),
                side=normalize_side(p["side"]),
            )
        rotations = c.get("available_rotations")
        chip_map[c["chip_id"]] = Chip(
            chip_id=c["chip_id"],
            pin_ids=tuple(p["pin_id"] for p in pins),
            size=_point(c["size"]),
            available_rotations=(
                tuple(int(r) for r in rotations) if rotations is not None else None
            ),
        )

    group_map: dict[str, Group] = {}
    group_pin_map: dict[str, GroupPin] = {}
    for g in data.get("groups", []):
        pins = g.get("pins", [])
        for p in pins:
            group_pin_map[p["pin_id"]] = GroupPin(
                pin_id=p["pin_id"], offset=_point(p["offset"]),
            )
        group_map[g["group_id"]] = Group(
            group_id=g["group_id"],
            pin_ids=tuple(p["pin_id"] for p in pins),
            shapes=tuple(
                tuple(float(v) for v in s) for s in g.get("shapes", [])
            ),
        )

    net_map: dict[str, Net] = {}
    for n in data.get("nets", []):
        net_id = n if isinstance(n, str) else n["net_id"]
        net_map[net_id] = Net(net_id=net_id)

    strong: dict[tuple[str, str], bool] = {}
    for pair in data.get("strong_connections", []):
        a, b = pair
        strong[(a, b)] = True
        strong[(b, a)] = True

    weak: dict[tuple[str, str], bool] = {}
    for pin_id, net_id in data.get("net_connections", []):
        weak[(pin_id, net_id)] = True

    return InputProblem(
        chip_map=chip_map,
        chip_pin_map=chip_pin_map,
        group_map=group_map,
        group_pin_map=group_pin_map,
        net_map=net_map,
        pin_strong_conn_map=strong,
        net_conn_map=weak,
        chip_gap=float(data.get("chip_gap", 0.2)),
        partition_gap=float(data.get("partition_gap", 2.0)),
    )


def _point(raw) -> tuple[float, float]:
    if isinstance(raw, dict):
        return float(raw["x"]), float(raw["y"])
    x, y = raw
    return float(x), float(y)
