"""Final cross-partition packing.

Every partition becomes one packer component with a single body pad
covering the partition's occupied bounds.  Partitions do not rotate;
each partition's placements are translated by its packed center.
"""

from __future__ import annotations

import logging

from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.config import LAYOUT_RULES
from schematic_layout.pipeline.layout.models import OutputLayout
from schematic_layout.pipeline.packer import Pad, PackComponent, PackInput, PackSolver
from schematic_layout.pipeline.problem.models import InputProblem
from schematic_layout.pipeline.visualize import visualize_input_problem

from .inner_packing import PackedPartition
from .pack_inputs import layout_bounds


log = logging.getLogger(__name__)


def partition_component(index: int, packed: PackedPartition) -> PackComponent:
    bounds = layout_bounds(packed.problem, packed.layout)
    if bounds is None:
        return PackComponent(f"partition_{index}", [], available_rotations=(0,))
    pad = LAYOUT_RULES.partition_padding
    x0, y0, x1, y1 = bounds
    return PackComponent(
        component_id=f"partition_{index}",
        pads=[Pad(
            pad_id=f"partition_{index}_body",
            network_id=f"partition_{index}_body_disconnected",
            offset=((x0 + x1) / 2, (y0 + y1) / 2),
            size=(x1 - x0 + 2 * pad, y1 - y0 + 2 * pad),
        )],
        available_rotations=(0,),
    )


def merge_layouts(layouts: list[OutputLayout]) -> OutputLayout:
    merged = OutputLayout()
    for layout in layouts:
        merged.chip_placements.update(layout.chip_placements)
        merged.group_placements.update(layout.group_placements)
    return merged


class PartitionPackingSolver(BaseSolver):
    """Packs whole partitions apart by ``partition_gap``."""

    kind = SolverKind.PARTITION_PACKING

    def __init__(
        self,
        packed_partitions: list[PackedPartition],
        problem: InputProblem,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.packed_partitions = packed_partitions
        self.problem = problem
        self.final_layout: OutputLayout | None = None

    def _step(self) -> None:
        if len(self.packed_partitions) <= 1:
            self.final_layout = merge_layouts(
                [p.layout for p in self.packed_partitions]
            )
            self.solved = True
            return

        self.active_sub_solver = PackSolver(PackInput(
            components=[
                partition_component(i, p)
                for i, p in enumerate(self.packed_partitions)
            ],
            min_gap=self.problem.partition_gap,
            order_strategy="largest_to_smallest",
            placement_strategy="minimum_sum_squared_distance_to_network",
        ))

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        centers = {c.component_id: c.center for c in sub.get_result().components}
        translated = []
        for i, packed in enumerate(self.packed_partitions):
            dx, dy = centers[f"partition_{i}"]
            translated.append(packed.layout.translated(dx, dy))
        self.final_layout = merge_layouts(translated)
        self.solved = True
        log.info("Packed %d partitions (gap=%.2f)",
                 len(self.packed_partitions), self.problem.partition_gap)

    def _visualize(self) -> dict:
        if self.final_layout is None:
            return super()._visualize()
        return visualize_input_problem(self.problem, self.final_layout)

    def get_constructor_params(self) -> dict:
        return {"packed_partitions": self.packed_partitions, "problem": self.problem}
