"""Packer input/output dataclasses and configuration constants."""

from __future__ import annotations

from dataclasses import dataclass, field


# ── Configuration ──────────────────────────────────────────────────

VALID_ROTATIONS = (0, 90, 180, 270)

ORDER_STRATEGIES = ("largest_to_smallest", "input_order")
PLACEMENT_STRATEGIES = (
    "minimum_sum_squared_distance_to_network",
    "shortest_connection_along_outline",
)

RING_SAMPLES_PER_SIDE = 8   # candidate positions along each side of a ring
GAP_EPS = 1e-9              # tolerance on the min-gap hard constraint

# Scoring weights (lower score wins).
W_NETWORK = 1.0             # MAIN driver: same-network pads close together
W_COMPACTNESS = 0.05        # weakly prefer positions near the placed centroid


# ── Input dataclasses ──────────────────────────────────────────────


@dataclass(frozen=True)
class Pad:
    """A rectangle attached to a component, tagged with its network.

    ``offset`` is the pad center relative to the component center at
    rotation 0.  Pads sharing a ``network_id`` attract each other.
    """

    pad_id: str
    network_id: str
    offset: tuple[float, float]
    size: tuple[float, float]


@dataclass
class PackComponent:
    component_id: str
    pads: list[Pad]
    available_rotations: tuple[int, ...] = VALID_ROTATIONS


@dataclass
class PackInput:
    components: list[PackComponent]
    min_gap: float
    order_strategy: str = "largest_to_smallest"
    placement_strategy: str = "minimum_sum_squared_distance_to_network"


# ── Output dataclasses ─────────────────────────────────────────────


@dataclass
class PackedComponent:
    """A component with a resolved center and rotation."""

    component_id: str
    center: tuple[float, float]
    ccw_rotation_degrees: int


@dataclass
class PackResult:
    components: list[PackedComponent] = field(default_factory=list)

    def by_id(self) -> dict[str, PackedComponent]:
        return {c.component_id: c for c in self.components}
