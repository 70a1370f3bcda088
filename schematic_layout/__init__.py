"""Schematic auto-layout: partition, group, filter and pack chips.

Subpackages:
  core       Solver abstraction, pipeline orchestrator, errors, clock.
  pipeline   Problem model, layout model, packer, config, visualization.
  solvers    The layout phases (partitions, pin ranges, packing, overlaps).
"""

from schematic_layout.pipeline.problem import InputProblem, parse_problem
from schematic_layout.pipeline.layout import OutputLayout, Placement
from schematic_layout.solvers.layout_pipeline import LayoutPipelineSolver

__all__ = [
    "InputProblem", "parse_problem",
    "OutputLayout", "Placement",
    "LayoutPipelineSolver",
]
