"""Network filtering: which network id each pin exposes to the packer.

If any strong (pin-to-pin) connection exists in the problem, every weak
(pin-to-net) connection is dropped and packing is driven purely by
strong links.  Otherwise weak connections are kept, except where a net
would pull a chip toward a strongly-connected neighbour from the wrong
side.  Strong connections are overlaid last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from schematic_layout.pipeline.problem.models import ChipPin, InputProblem


log = logging.getLogger(__name__)

# (from_chip, to_chip) -> sides of from_chip carrying a strong link to to_chip
ChipPairSides = dict[tuple[str, str], set[str]]


@dataclass
class NetworkFilteringResult:
    pin_to_network_map: dict[str, str] = field(default_factory=dict)
    """pin id -> network id handed to the packer."""

    filtered_pins: set[str] = field(default_factory=set)
    """Pins whose weak connection was suppressed or vetoed."""


def get_pin_id_to_strongly_connected_pins(
    problem: InputProblem,
) -> dict[str, list[ChipPin]]:
    """pin id -> chip pins it is strongly connected to (chip pins only)."""
    result: dict[str, list[ChipPin]] = {}
    pin_ids = list(problem.chip_pin_map)
    for i, a in enumerate(pin_ids):
        for b in pin_ids[i + 1:]:
            if problem.is_strongly_connected(a, b):
                result.setdefault(a, []).append(problem.chip_pin_map[b])
                result.setdefault(b, []).append(problem.chip_pin_map[a])
    return result


def strongly_connected_chip_sides(
    problem: InputProblem,
    strongly_connected: dict[str, list[ChipPin]],
) -> ChipPairSides:
    sides: ChipPairSides = {}
    for pin_id, others in strongly_connected.items():
        pin = problem.chip_pin_map.get(pin_id)
        from_chip = problem.owner_chip(pin_id)
        if pin is None or from_chip is None:
            continue
        for other in others:
            to_chip = problem.owner_chip(other.pin_id)
            if to_chip is None or to_chip == from_chip:
                continue
            sides.setdefault((from_chip, to_chip), set()).add(pin.side)
    return sides


def is_opposite_side_vetoed(
    problem: InputProblem,
    pin_id: str,
    net_id: str,
    chip_sides: ChipPairSides,
) -> bool:
    """True when *net_id* reaches a strong neighbour of the pin's chip
    through a pin on a side that carries none of their strong links."""
    chip_id = problem.owner_chip(pin_id)
    for (from_chip, to_chip), strong_sides in chip_sides.items():
        if from_chip != chip_id:
            continue
        for other_pin_id, other_net_id in problem.net_connections():
            if other_net_id != net_id or other_pin_id == pin_id:
                continue
            other_pin = problem.chip_pin_map.get(other_pin_id)
            if other_pin is None:
                continue
            if problem.owner_chip(other_pin_id) == to_chip \
                    and other_pin.side not in strong_sides:
                return True
    return False


def create_filtered_network_mapping(
    problem: InputProblem,
    strongly_connected: dict[str, list[ChipPin]] | None = None,
) -> NetworkFilteringResult:
    """Compute the pin -> network id map handed to the packer.

    Strong entries are overlaid after the weak pass: if either pin of a
    strong pair already has a network, both adopt it, otherwise both
    adopt the id ``"<pinA>-<pinB>"``.
    """
    if strongly_connected is None:
        strongly_connected = get_pin_id_to_strongly_connected_pins(problem)

    result = NetworkFilteringResult()
    network = result.pin_to_network_map
    has_strong = problem.has_strong_connections()

    if has_strong:
        # Any strong link anywhere suppresses every weak link.
        for pin_id, _net_id in problem.net_connections():
            result.filtered_pins.add(pin_id)
    else:
        chip_sides = strongly_connected_chip_sides(problem, strongly_connected)
        for pin_id, net_id in problem.net_connections():
            if pin_id not in problem.chip_pin_map:
                continue
            if is_opposite_side_vetoed(problem, pin_id, net_id, chip_sides):
                network[pin_id] = f"{pin_id}_opposite-strong-side-disconnected"
                result.filtered_pins.add(pin_id)
            else:
                network[pin_id] = net_id

    for a, b in problem.strong_connections():
        existing = network.get(a) or network.get(b)
        network_id = existing or f"{a}-{b}"
        network[a] = network_id
        network[b] = network_id

    log.debug("Filtered network mapping: %d pins mapped, %d weak links filtered",
              len(network), len(result.filtered_pins))
    return result
