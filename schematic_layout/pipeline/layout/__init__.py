"""Layout output: placements, geometry and serialization."""

from .models import Placement, OutputLayout, Overlap
from .geometry import (
    rotated_bounds, rotated_halfdims, overlap_area, find_overlaps,
    chip_polygon, pin_world_xy,
)
from .serialization import layout_to_dict, parse_layout

__all__ = [
    # Models
    "Placement", "OutputLayout", "Overlap",
    # Geometry
    "rotated_bounds", "rotated_halfdims", "overlap_area", "find_overlaps",
    "chip_polygon", "pin_world_xy",
    # Serialization
    "layout_to_dict", "parse_layout",
]
