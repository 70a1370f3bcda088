"""The schematic layout pipeline.

Phases (in order):
  chip_partitions           Split the problem into strongly-connected partitions.
  identify_decoupling_caps  Find decoupling-cap groups on the whole problem.
  pin_range_match           Build pin ranges per partition.
  pin_range_layout          Pack each range's chip with its passives.
  pack_inner_partitions     Pack each partition's chips and groups.
  pin_range_overlap         Apply range layouts and resolve overlaps.
  partition_packing         Pack the partitions apart and merge placements.

Usage::

    solver = LayoutPipelineSolver(problem)
    solver.solve()
    layout = solver.get_output_layout()
"""

from __future__ import annotations

import logging

from schematic_layout.core.errors import LayoutError, StructuralError
from schematic_layout.core.graphics import combine_graphics, tag_step
from schematic_layout.core.orchestrator import PipelineSolver, PipelineStep
from schematic_layout.pipeline.basic_layout import basic_layout
from schematic_layout.pipeline.layout.geometry import find_overlaps
from schematic_layout.pipeline.layout.models import OutputLayout, Overlap
from schematic_layout.pipeline.problem.models import InputProblem
from schematic_layout.pipeline.problem.validation import validate_problem
from schematic_layout.pipeline.visualize import visualize_input_problem

from .decoupling_caps import DecouplingCapGroup, IdentifyDecouplingCapsSolver
from .inner_packing import PackedPartition, PackInnerPartitionsSolver
from .overlap import PinRangeOverlapSolver
from .pack_inputs import chip_sizes
from .partition_packing import PartitionPackingSolver
from .partitions import ChipPartitionsSolver
from .pin_range_layout import PinRangeLayout, PinRangeLayoutSolver
from .pin_ranges import PinRange, PinRangeMatchSolver


log = logging.getLogger(__name__)


class LayoutPipelineSolver(PipelineSolver):
    """Runs every layout phase on one InputProblem."""

    def __init__(self, problem: InputProblem, **kwargs) -> None:
        super().__init__(**kwargs)
        self.problem = problem

        # Phase outputs, filled in by each phase's on_solved callback.
        self.partitions: list[InputProblem] = []
        self.decoupling_cap_groups: list[DecouplingCapGroup] = []
        self.pin_ranges: list[PinRange] = []
        self.range_layouts: list[PinRangeLayout] = []
        self.packed_partitions: list[PackedPartition] = []
        self.resolved_partitions: list[PackedPartition] = []
        self.final_layout: OutputLayout | None = None

        self.pipeline_def = [
            PipelineStep(
                "chip_partitions", ChipPartitionsSolver,
                lambda p: (p.problem,),
                lambda p: setattr(
                    p, "partitions", p.phase_solver("chip_partitions").partitions,
                ),
            ),
            PipelineStep(
                "identify_decoupling_caps", IdentifyDecouplingCapsSolver,
                lambda p: (p.problem,),
                lambda p: setattr(
                    p, "decoupling_cap_groups",
                    p.phase_solver("identify_decoupling_caps")
                    .output_decoupling_cap_groups,
                ),
            ),
            PipelineStep(
                "pin_range_match", PinRangeMatchSolver,
                lambda p: (p.partitions,),
                lambda p: setattr(
                    p, "pin_ranges",
                    p.phase_solver("pin_range_match").get_all_pin_ranges(),
                ),
            ),
            PipelineStep(
                "pin_range_layout", PinRangeLayoutSolver,
                lambda p: (p.pin_ranges, p.partitions),
                lambda p: setattr(
                    p, "range_layouts",
                    p.phase_solver("pin_range_layout").range_layouts,
                ),
            ),
            PipelineStep(
                "pack_inner_partitions", PackInnerPartitionsSolver,
                lambda p: (p.partitions, p.decoupling_cap_groups),
                lambda p: setattr(
                    p, "packed_partitions",
                    p.phase_solver("pack_inner_partitions").packed_partitions,
                ),
            ),
            PipelineStep(
                "pin_range_overlap", PinRangeOverlapSolver,
                lambda p: (p.packed_partitions, p.range_layouts),
                lambda p: setattr(
                    p, "resolved_partitions",
                    p.phase_solver("pin_range_overlap").resolved_partitions,
                ),
            ),
            PipelineStep(
                "partition_packing", PartitionPackingSolver,
                lambda p: (p.resolved_partitions, p.problem),
                lambda p: setattr(
                    p, "final_layout",
                    p.phase_solver("partition_packing").final_layout,
                ),
            ),
        ]

    # ── Stepping ────────────────────────────────────────────────────

    def _step(self) -> None:
        # Validate once, before the first phase starts.
        if self.current_phase_index == 0 and not self.phases:
            errors = validate_problem(self.problem)
            if errors:
                self.failed_phase = "validate_problem"
                error_list = "; ".join(errors)
                log.warning("Problem failed validation with %d errors", len(errors))
                raise StructuralError(
                    f"validate_problem: {error_list}", phase=self.failed_phase,
                )
        super()._step()

    # ── Results ────────────────────────────────────────────────────

    def check_for_overlaps(self, layout: OutputLayout) -> list[Overlap]:
        """Every overlapping chip pair of *layout*, with its overlap area."""
        return find_overlaps(layout.chip_placements, chip_sizes(self.problem))

    def get_output_layout(self) -> OutputLayout:
        if not self.solved or self.final_layout is None:
            raise LayoutError(
                "Pipeline solver has not been solved yet", phase=self.failed_phase,
            )
        overlaps = self.check_for_overlaps(self.final_layout)
        if overlaps:
            log.warning("Final layout has %d overlapping chip pairs", len(overlaps))
            for ov in overlaps:
                log.warning("  %s / %s overlap area %.4f",
                            ov.chip1, ov.chip2, ov.overlap_area)
        return self.final_layout

    # ── Observation ────────────────────────────────────────────────

    def _visualize(self) -> dict:
        graphics = [tag_step(
            visualize_input_problem(self.problem, basic_layout(self.problem)), 0,
        )]
        for i, record in enumerate(self.phases.values(), start=1):
            graphics.append(tag_step(record.solver.visualize(), i))
        if self.final_layout is not None:
            graphics.append(tag_step(
                visualize_input_problem(self.problem, self.final_layout),
                len(self.phases) + 1,
            ))
        return combine_graphics(graphics)

    def get_constructor_params(self) -> dict:
        return {"problem": self.problem, **super().get_constructor_params()}
