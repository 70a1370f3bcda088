"""Conversions between problem entities and packer components."""

from __future__ import annotations

from schematic_layout.pipeline.config import LAYOUT_RULES
from schematic_layout.pipeline.layout.geometry import Bounds, rotated_bounds, union_bounds
from schematic_layout.pipeline.layout.models import OutputLayout, Placement
from schematic_layout.pipeline.packer import Pad, PackComponent, PackResult, footprint_bounds
from schematic_layout.pipeline.problem.models import InputProblem


def pin_pad_size() -> tuple[float, float]:
    return (LAYOUT_RULES.pin_pad_size, LAYOUT_RULES.pin_pad_size)


def chip_pack_component(
    problem: InputProblem,
    chip_id: str,
    pin_to_network: dict[str, str],
    *,
    rotations: tuple[int, ...] | None = None,
) -> PackComponent:
    """Body pad plus one small pad per pin.

    The body pad sits on a network of its own, so it never attracts
    anything.  Pins without a mapped network get a singleton network.
    """
    chip = problem.chip_map[chip_id]
    pads = [Pad(
        pad_id=f"{chip_id}_body",
        network_id=f"{chip_id}_body_disconnected",
        offset=(0.0, 0.0),
        size=chip.size,
    )]
    for pin in problem.chip_pins(chip_id):
        pads.append(Pad(
            pad_id=pin.pin_id,
            network_id=pin_to_network.get(pin.pin_id, f"net_{pin.pin_id}"),
            offset=pin.offset,
            size=pin_pad_size(),
        ))
    return PackComponent(
        component_id=chip_id,
        pads=pads,
        available_rotations=rotations or chip.rotations,
    )


def group_pack_component(
    problem: InputProblem,
    group_id: str,
    pin_to_network: dict[str, str],
) -> PackComponent:
    """Each group shape becomes a body pad; groups do not rotate."""
    group = problem.group_map[group_id]
    pads: list[Pad] = []
    for i, (x0, y0, x1, y1) in enumerate(group.shapes):
        pads.append(Pad(
            pad_id=f"{group_id}_shape{i}",
            network_id=f"{group_id}_body_disconnected",
            offset=((x0 + x1) / 2, (y0 + y1) / 2),
            size=(x1 - x0, y1 - y0),
        ))
    for pin in problem.group_pins(group_id):
        pads.append(Pad(
            pad_id=pin.pin_id,
            network_id=pin_to_network.get(pin.pin_id, f"net_{pin.pin_id}"),
            offset=pin.offset,
            size=pin_pad_size(),
        ))
    return PackComponent(component_id=group_id, pads=pads, available_rotations=(0,))


def placements_from_pack(result: PackResult) -> dict[str, Placement]:
    return {
        c.component_id: Placement(
            x=c.center[0], y=c.center[1],
            ccw_rotation_degrees=c.ccw_rotation_degrees,
        )
        for c in result.components
    }


def layout_boxes(
    problem: InputProblem, layout: OutputLayout,
) -> dict[str, Bounds]:
    """Occupied bounds of every placed chip (rotated body) and group (shapes)."""
    boxes: dict[str, Bounds] = {}
    for chip_id, placement in layout.chip_placements.items():
        chip = problem.chip_map.get(chip_id)
        if chip is not None:
            boxes[chip_id] = rotated_bounds(placement, chip.size)
    for group_id, placement in layout.group_placements.items():
        if group_id not in problem.group_map:
            continue
        comp = group_pack_component(problem, group_id, {})
        boxes[group_id] = footprint_bounds(
            comp, (placement.x, placement.y),
            int(placement.ccw_rotation_degrees),
        )
    return boxes


def layout_bounds(problem: InputProblem, layout: OutputLayout) -> Bounds | None:
    return union_bounds(list(layout_boxes(problem, layout).values()))


def chip_sizes(problem: InputProblem) -> dict[str, tuple[float, float]]:
    return {chip_id: chip.size for chip_id, chip in problem.chip_map.items()}
