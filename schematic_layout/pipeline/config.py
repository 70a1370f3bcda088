"""Shared layout rules for the schematic pipeline.

Every phase (pin-range grouping, the packing phases, overlap resolution)
reads its thresholds from this single source of truth, so changing a
value here keeps all phases in sync.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutRules:
    """Thresholds and budgets for the layout pipeline.

    Distances are in schematic length units.
    """

    max_pin_range_gap: float = 0.2
    """Largest distance between consecutive pins of one pin range."""

    max_pin_range_size: int = 3
    """Largest number of pins in one pin range."""

    pin_pad_size: float = 0.1
    """Side length of the pad each pin contributes to the packer."""

    pin_range_pack_gap: float = 0.2
    """Gap between a range's chip and its passives when laid out together."""

    basic_layout_gap: float = 0.4
    """Gap used by the quick preview layout."""

    partition_padding: float = 0.0
    """Extra margin added around each partition before final packing."""

    solver_max_iterations: int = 10_000
    """Default step budget of a solver."""

    pipeline_max_iterations: int = 1_000_000
    """Step budget of the top-level layout pipeline."""

    max_overlap_passes: int = 100
    """Push-apart passes before overlap resolution gives up on a partition."""

    overlap_separation_buffer: float = 0.1
    """Extra distance added when pushing two overlapping chips apart."""

    group_synthetic_side: str = "x+"
    """Side label given to group pin ranges (groups have no edges)."""


# Module-level singleton, importable everywhere.
LAYOUT_RULES = LayoutRules()
