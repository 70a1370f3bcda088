"""Layout serialization: JSON conversion (layout_to_dict, parse_layout)."""

from __future__ import annotations

from .models import Placement, OutputLayout


def layout_to_dict(layout: OutputLayout) -> dict:
    """Convert an OutputLayout to a JSON-serializable dict."""
    return {
        "chip_placements": {
            cid: _placement_to_dict(p) for cid, p in layout.chip_placements.items()
        },
        "group_placements": {
            gid: _placement_to_dict(p) for gid, p in layout.group_placements.items()
        },
    }


def parse_layout(data: dict) -> OutputLayout:
    """Parse a layout dict back into an OutputLayout."""
    return OutputLayout(
        chip_placements={
            cid: _parse_placement(p)
            for cid, p in data.get("chip_placements", {}).items()
        },
        group_placements={
            gid: _parse_placement(p)
            for gid, p in data.get("group_placements", {}).items()
        },
    )


def _placement_to_dict(p: Placement) -> dict:
    return {"x": p.x, "y": p.y, "ccw_rotation_degrees": p.ccw_rotation_degrees}


def _parse_placement(data: dict) -> Placement:
    return Placement(
        x=float(data["x"]),
        y=float(data["y"]),
        ccw_rotation_degrees=data.get("ccw_rotation_degrees", 0),
    )
