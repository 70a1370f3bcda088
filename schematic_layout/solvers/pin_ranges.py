"""Pin-range grouping: cluster a chip's same-side pins into short runs.

A pin range is a run of at most ``max_pin_range_size`` pins on one side
of a chip (or group), where consecutive pins are no further apart than
``max_pin_range_gap``.  Two-pin chips strongly wired to a larger chip
are treated as passives: they get no ranges of their own and are
attached to the ranges whose pins they connect to.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from schematic_layout.core.graphics import empty_graphics, combine_graphics
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.config import LAYOUT_RULES
from schematic_layout.pipeline.problem.models import InputProblem, Side


log = logging.getLogger(__name__)

# (pin_id, offset) pairs as handed to the grouper
PinOffsets = list[tuple[str, tuple[float, float]]]


@dataclass(frozen=True)
class PinRange:
    pin_ids: tuple[str, ...]
    side: Side
    chip_id: str | None = None
    group_id: str | None = None
    connected_pins: tuple[str, ...] = ()
    connected_chips: tuple[str, ...] = ()

    @property
    def owner_id(self) -> str:
        return self.chip_id or self.group_id or ""


def _sort_along_side(pins: PinOffsets, side: Side) -> PinOffsets:
    if side in ("x-", "x+"):
        return sorted(pins, key=lambda p: p[1][1])
    return sorted(pins, key=lambda p: p[1][0])


def create_pin_ranges_for_side(
    side: Side,
    pins: PinOffsets,
    chip_id: str | None = None,
    group_id: str | None = None,
) -> list[PinRange]:
    """Walk the side's pins in order, closing a range on size or gap."""
    if not pins:
        return []

    max_size = LAYOUT_RULES.max_pin_range_size
    max_gap = LAYOUT_RULES.max_pin_range_gap
    ordered = _sort_along_side(pins, side)

    ranges: list[PinRange] = []
    current = [ordered[0][0]]
    for (_prev_id, prev_off), (pin_id, off) in zip(ordered, ordered[1:]):
        distance = math.hypot(off[0] - prev_off[0], off[1] - prev_off[1])
        if len(current) < max_size and distance <= max_gap:
            current.append(pin_id)
        else:
            ranges.append(PinRange(tuple(current), side, chip_id, group_id))
            current = [pin_id]
    ranges.append(PinRange(tuple(current), side, chip_id, group_id))
    return ranges


def _strong_partners(
    problem: InputProblem, pin_ids: tuple[str, ...],
) -> list[str]:
    """Pins strongly connected to any of *pin_ids*, either key order."""
    partners: list[str] = []
    for a, b in problem.strong_connections():
        if a in pin_ids:
            partners.append(b)
        elif b in pin_ids:
            partners.append(a)
    return partners


def find_passive_chips(problem: InputProblem) -> set[str]:
    """Two-pin chips strongly connected to a chip with more than two pins."""
    passives: set[str] = set()
    for chip_id, chip in problem.chip_map.items():
        if len(chip.pin_ids) != 2:
            continue
        for partner in _strong_partners(problem, chip.pin_ids):
            other = problem.owner_chip(partner)
            if other is not None and len(problem.chip_map[other].pin_ids) > 2:
                passives.add(chip_id)
                break
    return passives


def find_connected_passives(
    problem: InputProblem,
    range_pin_ids: tuple[str, ...],
    passives: set[str],
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """(connected pin ids, connected chip ids) of passives wired to the range."""
    connected_chips: list[str] = []
    connected_pins: list[str] = []
    for pin_id in range_pin_ids:
        for partner in _strong_partners(problem, (pin_id,)):
            chip_id = problem.owner_chip(partner)
            if chip_id is None or chip_id not in passives \
                    or chip_id in connected_chips:
                continue
            connected_chips.append(chip_id)
            for passive_pin in problem.chip_map[chip_id].pin_ids:
                if passive_pin not in connected_pins:
                    connected_pins.append(passive_pin)
    return tuple(connected_pins), tuple(connected_chips)


def create_pin_ranges(problem: InputProblem) -> list[PinRange]:
    """Every pin range of a partition, with connected passives attached."""
    passives = find_passive_chips(problem)
    ranges: list[PinRange] = []

    for chip_id in problem.chip_map:
        if chip_id in passives:
            continue
        by_side: dict[Side, PinOffsets] = {}
        for pin in problem.chip_pins(chip_id):
            by_side.setdefault(pin.side, []).append((pin.pin_id, pin.offset))
        for side, pins in by_side.items():
            ranges.extend(create_pin_ranges_for_side(side, pins, chip_id=chip_id))

    for group_id in problem.group_map:
        pins = [(p.pin_id, p.offset) for p in problem.group_pins(group_id)]
        ranges.extend(create_pin_ranges_for_side(
            LAYOUT_RULES.group_synthetic_side, pins, group_id=group_id,
        ))

    result = []
    for r in ranges:
        pins, chips = find_connected_passives(problem, r.pin_ids, passives)
        result.append(replace(r, connected_pins=pins, connected_chips=chips))
    return result


class PartitionPinRangeMatchSolver(BaseSolver):
    """Pin ranges for one partition, computed in a single step."""

    kind = SolverKind.PARTITION_PIN_RANGE_MATCH

    def __init__(self, partition: InputProblem, **kwargs) -> None:
        super().__init__(**kwargs)
        self.partition = partition
        self.pin_ranges: list[PinRange] = []

    def _step(self) -> None:
        self.pin_ranges = create_pin_ranges(self.partition)
        self.solved = True

    def _visualize(self) -> dict:
        graphics = empty_graphics()
        for r in self.pin_ranges:
            for pin_ids, color in ((r.pin_ids, "blue"), (r.connected_pins, "orange")):
                for pin_id in pin_ids:
                    pin = (self.partition.chip_pin_map.get(pin_id)
                           or self.partition.group_pin_map.get(pin_id))
                    if pin is not None:
                        graphics["points"].append({
                            "x": pin.offset[0], "y": pin.offset[1], "color": color,
                        })
        return graphics

    def get_constructor_params(self) -> dict:
        return {"partition": self.partition}


class PinRangeMatchSolver(BaseSolver):
    """Runs one PartitionPinRangeMatchSolver per partition."""

    kind = SolverKind.PIN_RANGE_MATCH

    def __init__(self, partitions: list[InputProblem], **kwargs) -> None:
        super().__init__(**kwargs)
        self.partitions = partitions
        self.partition_pin_ranges: list[list[PinRange]] = []
        self.completed: list[PartitionPinRangeMatchSolver] = []

    def _step(self) -> None:
        index = len(self.completed)
        if index >= len(self.partitions):
            self.solved = True
            log.info("Matched %d pin ranges across %d partitions",
                     len(self.get_all_pin_ranges()), len(self.partitions))
            return
        self.active_sub_solver = PartitionPinRangeMatchSolver(self.partitions[index])

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        self.completed.append(sub)
        self.partition_pin_ranges.append(sub.pin_ranges)
        log.debug("Partition %d: %d pin ranges",
                  len(self.completed) - 1, len(sub.pin_ranges))

    def get_all_pin_ranges(self) -> list[PinRange]:
        return [r for ranges in self.partition_pin_ranges for r in ranges]

    @property
    def progress(self) -> float:
        if not self.partitions:
            return 1.0 if self.solved else 0.0
        return len(self.completed) / len(self.partitions)

    def _visualize(self) -> dict:
        return combine_graphics([s.visualize() for s in self.completed])

    def get_constructor_params(self) -> dict:
        return {"partitions": self.partitions}
