"""Geometry helpers for placed chips: rotated bounds and overlaps."""

from __future__ import annotations

import math

from shapely import affinity
from shapely.geometry import Polygon, box as shapely_box

from .models import Placement, Overlap


Bounds = tuple[float, float, float, float]


def rotated_halfdims(
    size: tuple[float, float], rotation_deg: float,
) -> tuple[float, float]:
    """(half_width, half_height) of the AABB of a rotated rectangle."""
    hw, hh = size[0] / 2, size[1] / 2
    rad = math.radians(rotation_deg)
    cos_r = abs(math.cos(rad))
    sin_r = abs(math.sin(rad))
    return (hw * cos_r + hh * sin_r, hw * sin_r + hh * cos_r)


def rotated_bounds(placement: Placement, size: tuple[float, float]) -> Bounds:
    """Axis-aligned bounds of a chip of *size* at *placement*."""
    hw, hh = rotated_halfdims(size, placement.ccw_rotation_degrees)
    return (
        placement.x - hw, placement.y - hh,
        placement.x + hw, placement.y + hh,
    )


def rotate_point(
    point: tuple[float, float], rotation_deg: float,
) -> tuple[float, float]:
    """Rotate a local offset counter-clockwise about the origin."""
    px, py = point
    rad = math.radians(rotation_deg)
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)
    return (px * cos_r - py * sin_r, px * sin_r + py * cos_r)


def pin_world_xy(
    pin_local: tuple[float, float], placement: Placement,
) -> tuple[float, float]:
    """Transform a chip-local pin offset to world coordinates."""
    rx, ry = rotate_point(pin_local, placement.ccw_rotation_degrees)
    return (placement.x + rx, placement.y + ry)


def chip_polygon(placement: Placement, size: tuple[float, float]) -> Polygon:
    """Exact rotated outline of a chip body."""
    w, h = size
    body = shapely_box(-w / 2, -h / 2, w / 2, h / 2)
    body = affinity.rotate(body, placement.ccw_rotation_degrees, origin=(0, 0))
    return affinity.translate(body, placement.x, placement.y)


def overlap_area(b1: Bounds, b2: Bounds) -> float:
    """Intersection area of two axis-aligned bounds (0 when disjoint)."""
    return shapely_box(*b1).intersection(shapely_box(*b2)).area


def bounds_overlap(b1: Bounds, b2: Bounds, eps: float = 1e-9) -> bool:
    return (
        b1[0] < b2[2] - eps and b2[0] < b1[2] - eps
        and b1[1] < b2[3] - eps and b2[1] < b1[3] - eps
    )


def union_bounds(bounds: list[Bounds]) -> Bounds | None:
    if not bounds:
        return None
    return (
        min(b[0] for b in bounds), min(b[1] for b in bounds),
        max(b[2] for b in bounds), max(b[3] for b in bounds),
    )


def find_overlaps(
    chip_placements: dict[str, Placement],
    sizes: dict[str, tuple[float, float]],
) -> list[Overlap]:
    """Every pair of chips whose rotated bounding boxes overlap.

    Touching edges do not count.  Pairs are reported in placement order.
    """
    ids = [cid for cid in chip_placements if cid in sizes]
    bounds = {cid: rotated_bounds(chip_placements[cid], sizes[cid]) for cid in ids}
    overlaps: list[Overlap] = []
    for i, a in enumerate(ids):
        for b in ids[i + 1:]:
            if bounds_overlap(bounds[a], bounds[b]):
                area = chip_polygon(chip_placements[a], sizes[a]).intersection(
                    chip_polygon(chip_placements[b], sizes[b])
                ).area
                overlaps.append(Overlap(chip1=a, chip2=b, overlap_area=area))
    return overlaps
