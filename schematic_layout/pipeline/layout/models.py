"""Layout output dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Placement:
    """A chip or group center with its counter-clockwise rotation."""

    x: float
    y: float
    ccw_rotation_degrees: float = 0


@dataclass
class OutputLayout:
    """Placements for every chip and group of a problem."""

    chip_placements: dict[str, Placement] = field(default_factory=dict)
    group_placements: dict[str, Placement] = field(default_factory=dict)

    def copy(self) -> OutputLayout:
        return OutputLayout(
            chip_placements={
                k: Placement(p.x, p.y, p.ccw_rotation_degrees)
                for k, p in self.chip_placements.items()
            },
            group_placements={
                k: Placement(p.x, p.y, p.ccw_rotation_degrees)
                for k, p in self.group_placements.items()
            },
        )

    def translated(self, dx: float, dy: float) -> OutputLayout:
        """Copy of this layout shifted by (dx, dy)."""
        return OutputLayout(
            chip_placements={
                k: Placement(p.x + dx, p.y + dy, p.ccw_rotation_degrees)
                for k, p in self.chip_placements.items()
            },
            group_placements={
                k: Placement(p.x + dx, p.y + dy, p.ccw_rotation_degrees)
                for k, p in self.group_placements.items()
            },
        )


@dataclass
class Overlap:
    """Two chips whose rotated bounding boxes intersect."""

    chip1: str
    chip2: str
    overlap_area: float
