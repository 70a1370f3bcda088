"""Graphics for a raw input problem laid out by a (basic) layout."""

from __future__ import annotations

from schematic_layout.core.graphics import empty_graphics
from schematic_layout.pipeline.layout.geometry import pin_world_xy, rotated_halfdims
from schematic_layout.pipeline.layout.models import OutputLayout
from schematic_layout.pipeline.problem.models import InputProblem


def _pin_position(
    problem: InputProblem, layout: OutputLayout, pin_id: str,
) -> tuple[float, float] | None:
    chip_pin = problem.chip_pin_map.get(pin_id)
    if chip_pin is not None:
        chip_id = problem.owner_chip(pin_id)
        placement = layout.chip_placements.get(chip_id) if chip_id else None
        if placement is not None:
            return pin_world_xy(chip_pin.offset, placement)
        return chip_pin.offset
    group_pin = problem.group_pin_map.get(pin_id)
    if group_pin is not None:
        group_id = problem.owner_group(pin_id)
        placement = layout.group_placements.get(group_id) if group_id else None
        if placement is not None:
            return pin_world_xy(group_pin.offset, placement)
        return group_pin.offset
    return None


def visualize_input_problem(problem: InputProblem, layout: OutputLayout) -> dict:
    """Chips as labelled rects, pins as points, nets and strong pairs as lines."""
    graphics = empty_graphics()

    pin_to_net: dict[str, str] = {}
    for pin_id, net_id in problem.net_connections():
        pin_to_net[pin_id] = net_id

    for chip_id, chip in problem.chip_map.items():
        placement = layout.chip_placements.get(chip_id)
        if placement is None:
            continue
        hw, hh = rotated_halfdims(chip.size, placement.ccw_rotation_degrees)
        graphics["rects"].append({
            "center": {"x": placement.x, "y": placement.y},
            "width": hw * 2,
            "height": hh * 2,
            "label": chip_id,
        })
        graphics["texts"].append({"x": placement.x, "y": placement.y, "text": chip_id})

        for pin in problem.chip_pins(chip_id):
            x, y = pin_world_xy(pin.offset, placement)
            net_id = pin_to_net.get(pin.pin_id)
            graphics["points"].append({
                "x": x,
                "y": y,
                "label": f"{pin.pin_id} ({net_id})" if net_id else pin.pin_id,
            })

    # Net membership: every pair of pins on a net
    net_to_pins: dict[str, list[str]] = {}
    for pin_id, net_id in pin_to_net.items():
        net_to_pins.setdefault(net_id, []).append(pin_id)
    for pin_ids in net_to_pins.values():
        positions = [
            pos for pos in (_pin_position(problem, layout, p) for p in pin_ids)
            if pos is not None
        ]
        for i, p1 in enumerate(positions):
            for p2 in positions[i + 1:]:
                graphics["lines"].append({
                    "points": [{"x": p1[0], "y": p1[1]}, {"x": p2[0], "y": p2[1]}],
                    "strokeColor": "rgba(0,0,0,0.1)",
                })

    # Strong connections, one line per unordered pair
    seen: set[tuple[str, str]] = set()
    for a, b in problem.strong_connections():
        key = (a, b) if a < b else (b, a)
        if key in seen:
            continue
        seen.add(key)
        p1 = _pin_position(problem, layout, a)
        p2 = _pin_position(problem, layout, b)
        if p1 is None or p2 is None:
            continue
        graphics["lines"].append({
            "points": [{"x": p1[0], "y": p1[1]}, {"x": p2[0], "y": p2[1]}],
        })

    return graphics
