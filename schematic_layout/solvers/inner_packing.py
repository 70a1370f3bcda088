"""Inner partition packing: pack each partition's chips and groups.

Packing flow (per partition):
  1. Detect symmetric groups: decoupling-cap groups first, then chips
     with identical signatures (pin count, size, net count, rotations).
     Members of a symmetric group are restricted to one rotation.
  2. Run the packer as the active sub-solver (gap = ``chip_gap``).
  3. Try a grid arrangement for each symmetric group around the
     group's centroid; keep it only if it creates no overlap.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from schematic_layout.core.graphics import stack_graphics_horizontally
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.layout.geometry import bounds_overlap, rotated_halfdims
from schematic_layout.pipeline.layout.models import OutputLayout, Placement
from schematic_layout.pipeline.packer import PackInput, PackSolver
from schematic_layout.pipeline.problem.models import InputProblem
from schematic_layout.pipeline.visualize import visualize_input_problem

from .decoupling_caps import DecouplingCapGroup
from .network_filter import create_filtered_network_mapping
from .pack_inputs import (
    chip_pack_component, group_pack_component, placements_from_pack,
    layout_boxes,
)


log = logging.getLogger(__name__)


@dataclass
class SymmetricGroup:
    group_id: str
    chip_ids: list[str]
    priority: int


@dataclass
class PackedPartition:
    problem: InputProblem
    layout: OutputLayout


def component_signature(problem: InputProblem, chip_id: str) -> str:
    chip = problem.chip_map[chip_id]
    nets = {
        net_id for pin_id, net_id in problem.net_connections()
        if pin_id in chip.pin_ids
    }
    size_x = round(chip.width, 2)
    size_y = round(chip.height, 2)
    rotations = (
        ",".join(str(r) for r in chip.available_rotations)
        if chip.available_rotations else "any"
    )
    return (
        f"pins:{len(chip.pin_ids)}_size:{size_x:g}x{size_y:g}"
        f"_nets:{len(nets)}_rot:{rotations}"
    )


def detect_symmetric_groups(
    problem: InputProblem,
    decap_groups: list[DecouplingCapGroup] | None = None,
) -> list[SymmetricGroup]:
    """Symmetric groups, highest priority (largest) first."""
    groups: list[SymmetricGroup] = []
    taken: set[str] = set()

    for decap in decap_groups or []:
        members = [
            cid for cid in decap.decoupling_cap_chip_ids
            if cid in problem.chip_map and cid not in taken
        ]
        if len(members) >= 2:
            groups.append(SymmetricGroup(
                decap.decoupling_cap_group_id, members, len(members) * 10,
            ))
            taken.update(members)

    by_signature: dict[str, list[str]] = {}
    for chip_id in problem.chip_map:
        if chip_id not in taken:
            by_signature.setdefault(
                component_signature(problem, chip_id), [],
            ).append(chip_id)
    for signature, members in by_signature.items():
        if len(members) >= 2:
            groups.append(SymmetricGroup(
                f"symmetric_{signature}", sorted(members), len(members) * 10,
            ))

    return sorted(groups, key=lambda g: -g.priority)


def optimal_grid_dimensions(count: int) -> tuple[int, int]:
    """(columns, rows) for arranging *count* symmetric chips."""
    if count <= 2:
        return count, 1
    if count == 3:
        return 3, 1
    if count == 4:
        return 2, 2
    width = math.ceil(math.sqrt(count) * 1.2)
    height = math.ceil(count / width)
    while width * height - count > count * 0.3:
        width -= 1
        height = math.ceil(count / width)
    return width, height


def symmetric_rotation(rotations: tuple[int, ...]) -> int:
    return 0 if 0 in rotations else rotations[0]


class SingleInnerPartitionPackingSolver(BaseSolver):
    """Packs one partition; the packer runs as the active sub-solver."""

    kind = SolverKind.SINGLE_INNER_PARTITION_PACKING

    def __init__(
        self,
        partition: InputProblem,
        decap_groups: list[DecouplingCapGroup] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.partition = partition
        self.decap_groups = decap_groups or []
        self.symmetric_groups = detect_symmetric_groups(partition, self.decap_groups)
        self.layout: OutputLayout | None = None
        self.grid_groups: list[str] = []
        for group in self.symmetric_groups:
            log.debug("Symmetric group %s: %s", group.group_id, group.chip_ids)

    def create_pack_input(self) -> PackInput:
        network = create_filtered_network_mapping(self.partition)
        restricted = {
            chip_id: (symmetric_rotation(self.partition.chip_map[chip_id].rotations),)
            for group in self.symmetric_groups
            for chip_id in group.chip_ids
        }
        components = [
            chip_pack_component(
                self.partition, chip_id, network.pin_to_network_map,
                rotations=restricted.get(chip_id),
            )
            for chip_id in self.partition.chip_map
        ]
        components.extend(
            group_pack_component(self.partition, group_id, network.pin_to_network_map)
            for group_id in self.partition.group_map
        )
        return PackInput(
            components=components,
            min_gap=self.partition.chip_gap,
            order_strategy="largest_to_smallest",
            placement_strategy="minimum_sum_squared_distance_to_network",
        )

    def _step(self) -> None:
        self.active_sub_solver = PackSolver(self.create_pack_input())

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        placements = placements_from_pack(sub.get_result())
        self.layout = OutputLayout(
            chip_placements={
                cid: p for cid, p in placements.items()
                if cid in self.partition.chip_map
            },
            group_placements={
                gid: p for gid, p in placements.items()
                if gid in self.partition.group_map
            },
        )
        for group in self.symmetric_groups:
            if self._try_grid_arrangement(group):
                self.grid_groups.append(group.group_id)
        self.solved = True
        log.debug("Packed partition of %d chips, %d grid groups",
                  len(self.partition.chip_map), len(self.grid_groups))

    def _try_grid_arrangement(self, group: SymmetricGroup) -> bool:
        current = self.layout.chip_placements
        members = [cid for cid in group.chip_ids if cid in current]
        if not members:
            return False

        center_x = sum(current[cid].x for cid in members) / len(members)
        center_y = sum(current[cid].y for cid in members) / len(members)
        columns, rows = optimal_grid_dimensions(len(members))

        halfdims = [
            rotated_halfdims(
                self.partition.chip_map[cid].size,
                current[cid].ccw_rotation_degrees,
            )
            for cid in members
        ]
        gap = self.partition.chip_gap
        spacing_x = 2 * max(hw for hw, _ in halfdims) + gap
        spacing_y = 2 * max(hh for _, hh in halfdims) + gap
        start_x = center_x - (columns - 1) * spacing_x / 2
        start_y = center_y - (rows - 1) * spacing_y / 2

        candidate = self.layout.copy()
        for i, chip_id in enumerate(members):
            row, col = divmod(i, columns)
            candidate.chip_placements[chip_id] = Placement(
                x=start_x + col * spacing_x,
                y=start_y + row * spacing_y,
                ccw_rotation_degrees=current[chip_id].ccw_rotation_degrees,
            )

        boxes = list(layout_boxes(self.partition, candidate).values())
        for i, a in enumerate(boxes):
            for b in boxes[i + 1:]:
                if bounds_overlap(a, b):
                    return False
        self.layout = candidate
        return True

    def _visualize(self) -> dict:
        if self.layout is None:
            return super()._visualize()
        return visualize_input_problem(self.partition, self.layout)

    def get_constructor_params(self) -> dict:
        return {"partition": self.partition, "decap_groups": self.decap_groups}


class PackInnerPartitionsSolver(BaseSolver):
    """Runs one SingleInnerPartitionPackingSolver per partition."""

    kind = SolverKind.PACK_INNER_PARTITIONS

    def __init__(
        self,
        partitions: list[InputProblem],
        decap_groups: list[DecouplingCapGroup] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.partitions = partitions
        self.decap_groups = decap_groups or []
        self.packed_partitions: list[PackedPartition] = []
        self.completed: list[SingleInnerPartitionPackingSolver] = []

    def _step(self) -> None:
        index = len(self.packed_partitions)
        if index >= len(self.partitions):
            self.solved = True
            log.info("Packed %d partitions", len(self.packed_partitions))
            return
        self.active_sub_solver = SingleInnerPartitionPackingSolver(
            self.partitions[index], self.decap_groups,
        )

    def _on_sub_solver_solved(self, sub: BaseSolver) -> None:
        self.completed.append(sub)
        self.packed_partitions.append(PackedPartition(sub.partition, sub.layout))

    @property
    def progress(self) -> float:
        if not self.partitions:
            return 1.0 if self.solved else 0.0
        return len(self.packed_partitions) / len(self.partitions)

    def _visualize(self) -> dict:
        return stack_graphics_horizontally(
            [s.visualize() for s in self.completed],
            titles=[f"packed_partition_{i}" for i in range(len(self.completed))],
        )

    def get_constructor_params(self) -> dict:
        return {"partitions": self.partitions, "decap_groups": self.decap_groups}
