"""Quick single-pass layout used to preview a problem before solving."""

from __future__ import annotations

import logging

from schematic_layout.pipeline.config import LAYOUT_RULES
from schematic_layout.pipeline.layout.models import Placement, OutputLayout
from schematic_layout.pipeline.packer import Pad, PackComponent, PackInput, pack
from schematic_layout.pipeline.problem.models import InputProblem


log = logging.getLogger(__name__)

_PREVIEW_PAD_SIZE = (0.001, 0.001)


def basic_layout(problem: InputProblem) -> OutputLayout:
    """Pack every chip once, ignoring partitions and pin ranges.

    Each pin pad joins the network of its first strong connection
    (the sorted pin pair joined by ``_``), otherwise a network of its
    own.  The chip body is a pad on the chip's own network.
    """
    pin_network: dict[str, str] = {}
    for a, b in problem.strong_connections():
        network_id = "_".join(sorted((a, b)))
        pin_network.setdefault(a, network_id)
        pin_network.setdefault(b, network_id)

    components: list[PackComponent] = []
    for chip_id, chip in problem.chip_map.items():
        pads = [
            Pad(
                pad_id=pin.pin_id,
                network_id=pin_network.get(pin.pin_id, pin.pin_id),
                offset=pin.offset,
                size=_PREVIEW_PAD_SIZE,
            )
            for pin in problem.chip_pins(chip_id)
        ]
        pads.append(Pad(
            pad_id=f"{chip_id}-body",
            network_id=chip_id,
            offset=(0.0, 0.0),
            size=chip.size,
        ))
        components.append(PackComponent(component_id=chip_id, pads=pads))

    result = pack(PackInput(
        components=components,
        min_gap=LAYOUT_RULES.basic_layout_gap,
        order_strategy="largest_to_smallest",
        placement_strategy="shortest_connection_along_outline",
    ))
    log.debug("Basic layout packed %d chips", len(result.components))

    return OutputLayout(
        chip_placements={
            c.component_id: Placement(
                x=c.center[0], y=c.center[1],
                ccw_rotation_degrees=c.ccw_rotation_degrees,
            )
            for c in result.components
        },
    )
