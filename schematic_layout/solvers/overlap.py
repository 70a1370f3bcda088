"""Pin-range application and overlap resolution, one partition per step.

For each packed partition:
  1. Move every range's passives into their template position relative
     to the range's chip (first range to claim a passive wins).
  2. Push overlapping chip pairs apart along the axis of least overlap,
     for at most ``max_overlap_passes`` passes.
  3. If overlaps remain, fall back to the partition's packed layout,
     which the packer already made overlap-free.
"""

from __future__ import annotations

import logging

from schematic_layout.core.graphics import stack_graphics_horizontally
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.config import LAYOUT_RULES
from schematic_layout.pipeline.layout.geometry import (
    find_overlaps, rotate_point, rotated_bounds,
)
from schematic_layout.pipeline.layout.models import OutputLayout, Placement
from schematic_layout.pipeline.problem.models import InputProblem
from schematic_layout.pipeline.visualize import visualize_input_problem

from .inner_packing import PackedPartition
from .pack_inputs import chip_sizes
from .pin_range_layout import PinRangeLayout


log = logging.getLogger(__name__)


def apply_range_layouts(
    layout: OutputLayout,
    range_layouts: list[PinRangeLayout],
    problem: InputProblem | None = None,
) -> set[str]:
    """Move passives into place around their range chip (in place).

    With *problem* given, a passive whose new rotation is not among its
    available rotations stays where it is.  Returns the ids of the
    chips that were moved.
    """
    moved: set[str] = set()
    for rl in range_layouts:
        anchor_id = rl.pin_range.chip_id
        if anchor_id is None:
            continue
        template_anchor = rl.layout.chip_placements.get(anchor_id)
        anchor = layout.chip_placements.get(anchor_id)
        if template_anchor is None or anchor is None:
            continue
        delta = anchor.ccw_rotation_degrees - template_anchor.ccw_rotation_degrees
        for passive_id in rl.pin_range.connected_chips:
            if passive_id in moved or passive_id == anchor_id:
                continue
            template = rl.layout.chip_placements.get(passive_id)
            if template is None or passive_id not in layout.chip_placements:
                continue
            rx, ry = rotate_point(
                (template.x - template_anchor.x, template.y - template_anchor.y),
                delta,
            )
            rotation = (template.ccw_rotation_degrees + delta) % 360
            if problem is not None and passive_id in problem.chip_map \
                    and rotation not in problem.chip_map[passive_id].rotations:
                continue
            layout.chip_placements[passive_id] = Placement(
                x=anchor.x + rx, y=anchor.y + ry, ccw_rotation_degrees=rotation,
            )
            moved.add(passive_id)
    return moved


def push_apart(
    layout: OutputLayout,
    sizes: dict[str, tuple[float, float]],
    chip1: str,
    chip2: str,
) -> None:
    """Separate two overlapping chips along their axis of least overlap."""
    p1 = layout.chip_placements[chip1]
    p2 = layout.chip_placements[chip2]
    b1 = rotated_bounds(p1, sizes[chip1])
    b2 = rotated_bounds(p2, sizes[chip2])
    overlap_x = min(b1[2], b2[2]) - max(b1[0], b2[0])
    overlap_y = min(b1[3], b2[3]) - max(b1[1], b2[1])
    buffer = LAYOUT_RULES.overlap_separation_buffer

    if overlap_x <= overlap_y:
        shift = overlap_x / 2 + buffer
        sign = 1.0 if p2.x >= p1.x else -1.0
        p1.x -= sign * shift
        p2.x += sign * shift
    else:
        shift = overlap_y / 2 + buffer
        sign = 1.0 if p2.y >= p1.y else -1.0
        p1.y -= sign * shift
        p2.y += sign * shift


def resolve_overlaps(
    layout: OutputLayout, sizes: dict[str, tuple[float, float]],
) -> bool:
    """Push-apart passes until overlap-free. Returns True on success."""
    for _ in range(LAYOUT_RULES.max_overlap_passes):
        overlaps = find_overlaps(layout.chip_placements, sizes)
        if not overlaps:
            return True
        for ov in overlaps:
            push_apart(layout, sizes, ov.chip1, ov.chip2)
    return not find_overlaps(layout.chip_placements, sizes)


class PinRangeOverlapSolver(BaseSolver):
    """Applies pin-range layouts to packed partitions, one per step."""

    kind = SolverKind.PIN_RANGE_OVERLAP

    def __init__(
        self,
        packed_partitions: list[PackedPartition],
        range_layouts: list[PinRangeLayout],
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.packed_partitions = packed_partitions
        self.range_layouts = range_layouts
        self.resolved_partitions: list[PackedPartition] = []
        self.reverted_partitions: list[int] = []

    def _step(self) -> None:
        index = len(self.resolved_partitions)
        if index >= len(self.packed_partitions):
            self.solved = True
            log.info("Applied pin ranges to %d partitions (%d reverted)",
                     len(self.resolved_partitions), len(self.reverted_partitions))
            return

        packed = self.packed_partitions[index]
        layout = packed.layout.copy()
        moved = apply_range_layouts(layout, [
            rl for rl in self.range_layouts if rl.partition_index == index
        ], packed.problem)
        sizes = chip_sizes(packed.problem)
        if not resolve_overlaps(layout, sizes):
            log.warning("Partition %d still overlaps after %d passes; "
                        "keeping its packed layout",
                        index, LAYOUT_RULES.max_overlap_passes)
            layout = packed.layout.copy()
            self.reverted_partitions.append(index)
        else:
            log.debug("Partition %d: moved %d passives", index, len(moved))
        self.resolved_partitions.append(PackedPartition(packed.problem, layout))

    @property
    def progress(self) -> float:
        if not self.packed_partitions:
            return 1.0 if self.solved else 0.0
        return len(self.resolved_partitions) / len(self.packed_partitions)

    def _visualize(self) -> dict:
        return stack_graphics_horizontally(
            [visualize_input_problem(p.problem, p.layout)
             for p in self.resolved_partitions],
            titles=[f"partition_{i}" for i in range(len(self.resolved_partitions))],
        )

    def get_constructor_params(self) -> dict:
        return {
            "packed_partitions": self.packed_partitions,
            "range_layouts": self.range_layouts,
        }
