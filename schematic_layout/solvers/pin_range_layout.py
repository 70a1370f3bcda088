"""Pin-range layout: pack each range's chip together with its passives.

The resulting small layouts are templates: the overlap phase later
moves each range's passives into the same relative position around the
range's chip in the packed partition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from schematic_layout.core.graphics import stack_graphics_horizontally
from schematic_layout.core.errors import StructuralError
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.config import LAYOUT_RULES
from schematic_layout.pipeline.layout.models import OutputLayout
from schematic_layout.pipeline.packer import PackInput, pack
from schematic_layout.pipeline.problem.models import InputProblem
from schematic_layout.pipeline.visualize import visualize_input_problem

from .network_filter import create_filtered_network_mapping
from .pack_inputs import chip_pack_component, placements_from_pack
from .pin_ranges import PinRange


log = logging.getLogger(__name__)


@dataclass
class PinRangeLayout:
    """A range's template layout and the partition it belongs to."""

    pin_range: PinRange
    partition_index: int
    layout: OutputLayout


def find_partition_for_range(
    pin_range: PinRange, partitions: list[InputProblem],
) -> int | None:
    """Index of the first partition holding every pin of the range."""
    for i, partition in enumerate(partitions):
        if all(
            pid in partition.chip_pin_map or pid in partition.group_pin_map
            for pid in pin_range.pin_ids
        ):
            return i
    return None


class SinglePinRangeLayoutSolver(BaseSolver):
    """Packs one range's chip and its connected passives in one step."""

    kind = SolverKind.SINGLE_PIN_RANGE_LAYOUT

    def __init__(
        self, pin_range: PinRange, partition: InputProblem, **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.pin_range = pin_range
        self.partition = partition
        self.layout: OutputLayout | None = None

    def relevant_chip_ids(self) -> list[str]:
        chip_ids: list[str] = []
        for pin_id in self.pin_range.pin_ids:
            chip_id = self.partition.owner_chip(pin_id)
            if chip_id is not None and chip_id not in chip_ids:
                chip_ids.append(chip_id)
        for chip_id in self.pin_range.connected_chips:
            if chip_id in self.partition.chip_map and chip_id not in chip_ids:
                chip_ids.append(chip_id)
        return chip_ids

    def _step(self) -> None:
        chip_ids = self.relevant_chip_ids()
        if not chip_ids:
            self.layout = OutputLayout()
            self.solved = True
            return

        network = create_filtered_network_mapping(self.partition)
        result = pack(PackInput(
            components=[
                chip_pack_component(
                    self.partition, chip_id, network.pin_to_network_map,
                )
                for chip_id in chip_ids
            ],
            min_gap=LAYOUT_RULES.pin_range_pack_gap,
            order_strategy="largest_to_smallest",
            placement_strategy="shortest_connection_along_outline",
        ))
        self.layout = OutputLayout(chip_placements=placements_from_pack(result))
        self.solved = True
        log.debug("Pin range %s (%s): laid out %d chips",
                  self.pin_range.owner_id, self.pin_range.side, len(chip_ids))

    def _visualize(self) -> dict:
        if self.layout is None:
            return super()._visualize()
        graphics = visualize_input_problem(self.partition, self.layout)
        for chip_id in self.pin_range.connected_chips:
            placement = self.layout.chip_placements.get(chip_id)
            chip = self.partition.chip_map.get(chip_id)
            if placement is None or chip is None:
                continue
            graphics["rects"].append({
                "center": {"x": placement.x, "y": placement.y},
                "width": chip.width + 0.2,
                "height": chip.height + 0.2,
                "strokeColor": "green",
                "label": f"Connected: {chip_id}",
            })
        return graphics

    def get_constructor_params(self) -> dict:
        return {"pin_range": self.pin_range, "partition": self.partition}


class PinRangeLayoutSolver(BaseSolver):
    """Runs one SinglePinRangeLayoutSolver per pin range."""

    kind = SolverKind.PIN_RANGE_LAYOUT

    def __init__(
        self,
        pin_ranges: list[PinRange],
        partitions: list[InputProblem],
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.pin_ranges = pin_ranges
        self.partitions = partitions
        self.current_range_index = 0
        self.range_layouts: list[PinRangeLayout] = []
        self.completed: list[SinglePinRangeLayoutSolver] = []
        self._current_partition: int | None = None

    def _step(self) -> None:
        if self.current_range_index >= len(self.pin_ranges):
            self.solved = True
            log.info("Laid out %d pin ranges", len(self.range_layouts))
            return

        pin_range = self.pin_ranges[self.current_range_index]
        index = find_partition_for_range(pin_range, self.partitions)
        if index is None:
            raise StructuralError(
                f"Could not find partition for pin range {self.current_range_index}"
            )
        self._current_partition = index
        self.active_sub_solver = SinglePinRangeLayoutSolver(
            pin_range, self.partitions[index],
        )

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        self.completed.append(sub)
        self.range_layouts.append(PinRangeLayout(
            pin_range=sub.pin_range,
            partition_index=self._current_partition,
            layout=sub.layout,
        ))
        self.current_range_index += 1

    @property
    def progress(self) -> float:
        if not self.pin_ranges:
            return 1.0 if self.solved else 0.0
        return self.current_range_index / len(self.pin_ranges)

    def _visualize(self) -> dict:
        return stack_graphics_horizontally(
            [s.visualize() for s in self.completed],
            titles=[
                f"Range {i} ({s.pin_range.side})"
                for i, s in enumerate(self.completed)
            ],
        )

    def get_constructor_params(self) -> dict:
        return {"pin_ranges": self.pin_ranges, "partitions": self.partitions}
