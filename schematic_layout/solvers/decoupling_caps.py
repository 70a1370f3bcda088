"""Decoupling capacitor identification.

A chip is treated as a decoupling cap when:
  1. it has exactly two pins and its rotation is restricted to a
     non-empty subset of {0, 180},
  2. one pin sits on the ``y+`` side and the other on ``y-``,
  3. it is strongly connected to at least one other chip (the main
     chip: most connections wins, ties go to the smaller id),
  4. its pins reach exactly two distinct nets.

Caps sharing a main chip and net pair form one group.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from schematic_layout.core.graphics import get_color_from_string
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.basic_layout import basic_layout
from schematic_layout.pipeline.problem.models import Chip, InputProblem
from schematic_layout.pipeline.visualize import visualize_input_problem


log = logging.getLogger(__name__)

_DECAP_ROTATIONS = {0, 180}


@dataclass
class DecouplingCapGroup:
    decoupling_cap_group_id: str
    main_chip_id: str
    net_pair: tuple[str, str]
    decoupling_cap_chip_ids: list[str] = field(default_factory=list)


def is_two_pin_restricted_rotation(chip: Chip) -> bool:
    if len(chip.pin_ids) != 2 or not chip.available_rotations:
        return False
    return all(r in _DECAP_ROTATIONS for r in chip.available_rotations)


def pins_on_opposite_y_sides(problem: InputProblem, chip: Chip) -> bool:
    pins = [problem.chip_pin_map.get(pid) for pid in chip.pin_ids]
    if len(pins) != 2 or None in pins:
        return False
    return {p.side for p in pins} == {"y+", "y-"}


def find_main_chip_id(problem: InputProblem, cap: Chip) -> str | None:
    """Strong neighbour with the most connections (ties: smallest id)."""
    counts: dict[str, int] = {}
    for pin_id in cap.pin_ids:
        neighbours: set[str] = set()
        for a, b in problem.strong_connections():
            other = b if a == pin_id else a if b == pin_id else None
            if other is None:
                continue
            chip_id = problem.owner_chip(other)
            if chip_id is not None:
                neighbours.add(chip_id)
        for chip_id in neighbours:
            if chip_id != cap.chip_id:
                counts[chip_id] = counts.get(chip_id, 0) + 1
    if not counts:
        return None
    return min(counts, key=lambda cid: (-counts[cid], cid))


def get_net_pair(problem: InputProblem, cap: Chip) -> tuple[str, str] | None:
    """Sorted pair of nets reached by the cap's pins, if exactly two."""
    nets = {
        net_id for pin_id, net_id in problem.net_connections()
        if pin_id in cap.pin_ids
    }
    if len(nets) != 2:
        return None
    n1, n2 = sorted(nets)
    return (n1, n2)


class IdentifyDecouplingCapsSolver(BaseSolver):
    """Examines one chip per step."""

    kind = SolverKind.IDENTIFY_DECOUPLING_CAPS

    def __init__(self, problem: InputProblem, **kwargs) -> None:
        super().__init__(**kwargs)
        self.problem = problem
        self.queued_chips: list[Chip] = list(problem.chip_map.values())
        self.output_decoupling_cap_groups: list[DecouplingCapGroup] = []
        self._groups_by_key: dict[tuple[str, str, str], DecouplingCapGroup] = {}
        self.last_chip: Chip | None = None

    def _step(self) -> None:
        if not self.queued_chips:
            self.last_chip = None
            self.solved = True
            log.info("Identified %d decoupling cap groups",
                     len(self.output_decoupling_cap_groups))
            return

        chip = self.queued_chips.pop(0)
        self.last_chip = chip
        if not (is_two_pin_restricted_rotation(chip)
                and pins_on_opposite_y_sides(self.problem, chip)):
            return
        main_chip_id = find_main_chip_id(self.problem, chip)
        if main_chip_id is None:
            return
        net_pair = get_net_pair(self.problem, chip)
        if net_pair is None:
            return
        self._add_to_group(main_chip_id, net_pair, chip.chip_id)

    def _add_to_group(
        self, main_chip_id: str, net_pair: tuple[str, str], cap_chip_id: str,
    ) -> None:
        n1, n2 = net_pair
        key = (main_chip_id, n1, n2)
        group = self._groups_by_key.get(key)
        if group is None:
            group = DecouplingCapGroup(
                decoupling_cap_group_id=f"decap_group_{main_chip_id}__{n1}__{n2}",
                main_chip_id=main_chip_id,
                net_pair=net_pair,
            )
            self._groups_by_key[key] = group
            self.output_decoupling_cap_groups.append(group)
        if cap_chip_id not in group.decoupling_cap_chip_ids:
            group.decoupling_cap_chip_ids.append(cap_chip_id)
            log.debug("Decoupling cap %s -> %s", cap_chip_id,
                      group.decoupling_cap_group_id)

    @property
    def progress(self) -> float:
        total = len(self.problem.chip_map) or 1
        processed = total - len(self.queued_chips)
        return min(1.0, max(0.0, processed / total))

    def _visualize(self) -> dict:
        graphics = visualize_input_problem(self.problem, basic_layout(self.problem))
        chip_group: dict[str, DecouplingCapGroup] = {}
        for group in self.output_decoupling_cap_groups:
            chip_group[group.main_chip_id] = group
            for cap_id in group.decoupling_cap_chip_ids:
                chip_group[cap_id] = group

        for rect in graphics["rects"]:
            chip_id = rect["label"]
            if self.last_chip is None or chip_id != self.last_chip.chip_id:
                rect["fill"] = "rgba(0,0,0,0.5)"
            group = chip_group.get(chip_id)
            if group is not None:
                rect["label"] = f"{chip_id}\n{group.decoupling_cap_group_id}"
                rect["fill"] = get_color_from_string(
                    group.decoupling_cap_group_id, 0.8,
                )
        return graphics

    def get_constructor_params(self) -> dict:
        return {"problem": self.problem}
