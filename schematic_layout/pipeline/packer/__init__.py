"""Packer: places pad-carrying components without overlap.

Submodules:
  models    Input/output dataclasses and configuration constants.
  geometry  Footprint bounds, AABB clearance and ring candidates.
  scoring   Candidate scoring (network proximity, compactness).
  engine    Packing algorithm (ring-candidate search) and PackSolver.
"""

from .models import (
    Pad, PackComponent, PackInput, PackedComponent, PackResult,
    ORDER_STRATEGIES, PLACEMENT_STRATEGIES,
)
from .engine import PackSolver, pack, validate_pack_input
from .geometry import footprint_bounds, aabb_clearance

__all__ = [
    # Models
    "Pad", "PackComponent", "PackInput", "PackedComponent", "PackResult",
    "ORDER_STRATEGIES", "PLACEMENT_STRATEGIES",
    # Engine
    "PackSolver", "pack", "validate_pack_input",
    # Geometry
    "footprint_bounds", "aabb_clearance",
]
