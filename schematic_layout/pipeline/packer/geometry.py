"""Low-level geometry helpers for the packer."""

from __future__ import annotations

from schematic_layout.pipeline.layout.geometry import (
    Bounds, rotate_point, rotated_halfdims, union_bounds,
)

from .models import Pad, PackComponent


def pad_world_center(
    pad: Pad, center: tuple[float, float], rotation_deg: int,
) -> tuple[float, float]:
    ox, oy = rotate_point(pad.offset, rotation_deg)
    return (center[0] + ox, center[1] + oy)


def pad_bounds(
    pad: Pad, center: tuple[float, float], rotation_deg: int,
) -> Bounds:
    cx, cy = pad_world_center(pad, center, rotation_deg)
    hw, hh = rotated_halfdims(pad.size, rotation_deg)
    return (cx - hw, cy - hh, cx + hw, cy + hh)


def footprint_bounds(
    component: PackComponent,
    center: tuple[float, float],
    rotation_deg: int,
) -> Bounds:
    """AABB of every pad of *component* placed at *center*.

    A component without pads occupies a single point.
    """
    bounds = union_bounds([
        pad_bounds(pad, center, rotation_deg) for pad in component.pads
    ])
    if bounds is None:
        return (center[0], center[1], center[0], center[1])
    return bounds


def footprint_area(component: PackComponent) -> float:
    """Footprint area at rotation 0, used for placement ordering."""
    x0, y0, x1, y1 = footprint_bounds(component, (0.0, 0.0), 0)
    return (x1 - x0) * (y1 - y0)


def aabb_clearance(b1: Bounds, b2: Bounds) -> float:
    """Chebyshev gap between two AABBs.

    Returns the larger of the x and y separations.  Negative values
    mean overlap.
    """
    gap_x = max(b1[0], b2[0]) - min(b1[2], b2[2])
    gap_y = max(b1[1], b2[1]) - min(b1[3], b2[3])
    return max(gap_x, gap_y)


def ring_positions(
    box: Bounds,
    local: Bounds,
    gap: float,
    samples: int,
) -> list[tuple[float, float]]:
    """Centers that put a footprint *local* exactly *gap* outside *box*.

    *local* is the footprint relative to its own center.  Positions are
    sampled along all four sides, sliding from one corner to the other.
    """
    bx0, by0, bx1, by1 = box
    lx0, ly0, lx1, ly1 = local
    y_lo, y_hi = by0 - ly1, by1 - ly0
    x_lo, x_hi = bx0 - lx1, bx1 - lx0
    positions: list[tuple[float, float]] = []
    for i in range(samples + 1):
        t = i / samples if samples else 0.5
        y = y_lo + (y_hi - y_lo) * t
        x = x_lo + (x_hi - x_lo) * t
        positions.append((bx1 + gap - lx0, y))     # right
        positions.append((bx0 - gap - lx1, y))     # left
        positions.append((x, by1 + gap - ly0))     # top
        positions.append((x, by0 - gap - ly1))     # bottom
    return positions
