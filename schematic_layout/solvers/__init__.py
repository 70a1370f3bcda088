"""Solvers: the phases of the layout pipeline.

Submodules:
  network_filter     Per-pin network ids handed to the packer.
  partitions         Strongly-connected chip partitions.
  decoupling_caps    Decoupling capacitor groups.
  pin_ranges         Pin-range grouping per partition.
  pin_range_layout   Template layouts for each range and its passives.
  inner_packing      Packing inside each partition (symmetric groups).
  overlap            Range application and overlap resolution.
  partition_packing  Packing partitions apart.
  layout_pipeline    The full pipeline.
"""

from .network_filter import (
    NetworkFilteringResult, create_filtered_network_mapping,
    get_pin_id_to_strongly_connected_pins,
)
from .partitions import ChipPartitionsSolver, partition_problem
from .decoupling_caps import DecouplingCapGroup, IdentifyDecouplingCapsSolver
from .pin_ranges import (
    PinRange, PartitionPinRangeMatchSolver, PinRangeMatchSolver,
    create_pin_ranges_for_side,
)
from .pin_range_layout import (
    PinRangeLayout, SinglePinRangeLayoutSolver, PinRangeLayoutSolver,
)
from .inner_packing import (
    PackedPartition, SingleInnerPartitionPackingSolver, PackInnerPartitionsSolver,
)
from .overlap import PinRangeOverlapSolver
from .partition_packing import PartitionPackingSolver
from .layout_pipeline import LayoutPipelineSolver

__all__ = [
    # Network filter
    "NetworkFilteringResult", "create_filtered_network_mapping",
    "get_pin_id_to_strongly_connected_pins",
    # Partitions / decoupling caps
    "ChipPartitionsSolver", "partition_problem",
    "DecouplingCapGroup", "IdentifyDecouplingCapsSolver",
    # Pin ranges
    "PinRange", "PartitionPinRangeMatchSolver", "PinRangeMatchSolver",
    "create_pin_ranges_for_side",
    "PinRangeLayout", "SinglePinRangeLayoutSolver", "PinRangeLayoutSolver",
    # Packing phases
    "PackedPartition", "SingleInnerPartitionPackingSolver",
    "PackInnerPartitionsSolver", "PinRangeOverlapSolver", "PartitionPackingSolver",
    # Pipeline
    "LayoutPipelineSolver",
]
