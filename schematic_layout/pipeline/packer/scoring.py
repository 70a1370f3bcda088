"""Candidate position scoring for the packer."""

from __future__ import annotations

import math

from .models import W_NETWORK, W_COMPACTNESS


# network_id -> world centers of already-placed pads on that network
NetworkPads = dict[str, list[tuple[float, float]]]


def network_distance_cost(
    pad_positions: list[tuple[str, tuple[float, float]]],
    placed_network_pads: NetworkPads,
    *,
    squared: bool,
) -> float:
    """Sum over pads of the distance to the nearest same-network placed pad.

    Pads whose network has no placed member contribute nothing.
    """
    total = 0.0
    for network_id, (px, py) in pad_positions:
        others = placed_network_pads.get(network_id)
        if not others:
            continue
        best = min((px - ox) ** 2 + (py - oy) ** 2 for ox, oy in others)
        total += best if squared else math.sqrt(best)
    return total


def score_candidate(
    center: tuple[float, float],
    pad_positions: list[tuple[str, tuple[float, float]]],
    placed_network_pads: NetworkPads,
    placed_centroid: tuple[float, float] | None,
    placement_strategy: str,
) -> float:
    """Score a candidate position (lower is better)."""
    squared = placement_strategy == "minimum_sum_squared_distance_to_network"
    score = W_NETWORK * network_distance_cost(
        pad_positions, placed_network_pads, squared=squared,
    )
    if placed_centroid is not None:
        dx = center[0] - placed_centroid[0]
        dy = center[1] - placed_centroid[1]
        score += W_COMPACTNESS * (dx * dx + dy * dy)
    return score
