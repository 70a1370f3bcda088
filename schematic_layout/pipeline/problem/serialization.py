"""Problem serialization: convert an InputProblem to JSON-safe dicts."""

from __future__ import annotations

from .models import InputProblem


def problem_to_dict(problem: InputProblem) -> dict:
    """Convert an InputProblem to a JSON-serializable dict.

    Strong connections are emitted once per unordered pair, in the
    order their first direction was stored.
    """
    strong_pairs: list[list[str]] = []
    seen: set[frozenset[str]] = set()
    for a, b in problem.strong_connections():
        key = frozenset((a, b))
        if key in seen:
            continue
        seen.add(key)
        strong_pairs.append([a, b])

    return {
        "chips": [
            {
                "chip_id": chip.chip_id,
                "size": list(chip.size),
                **({"available_rotations": list(chip.available_rotations)}
                   if chip.available_rotations is not None else {}),
                "pins": [
                    {
                        "pin_id": pin.pin_id,
                        "offset": list(pin.offset),
                        "side": pin.side,
                    }
                    for pin in problem.chip_pins(chip.chip_id)
                ],
            }
            for chip in problem.chip_map.values()
        ],
        "groups": [
            {
                "group_id": group.group_id,
                "shapes": [list(s) for s in group.shapes],
                "pins": [
                    {"pin_id": pin.pin_id, "offset": list(pin.offset)}
                    for pin in problem.group_pins(group.group_id)
                ],
            }
            for group in problem.group_map.values()
        ],
        "nets": [{"net_id": net_id} for net_id in problem.net_map],
        "strong_connections": strong_pairs,
        "net_connections": [list(key) for key in problem.net_connections()],
        "chip_gap": problem.chip_gap,
        "partition_gap": problem.partition_gap,
    }
