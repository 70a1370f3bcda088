"""Main packing engine: ring-candidate search with hard/soft constraints.

Components are placed one at a time.  Candidate centers lie on the
min-gap ring around every placed footprint, on the ring around the
whole placed set, and at positions that line a pad up with a placed
pad of the same network.  A candidate is legal when its footprint
keeps ``min_gap`` from every placed footprint; the legal candidate with
the lowest score wins (earliest candidate on ties).
"""

from __future__ import annotations

import logging

from schematic_layout.core.errors import PackError
from schematic_layout.core.graphics import empty_graphics, get_color_from_string
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.layout.geometry import Bounds, union_bounds

from .geometry import (
    footprint_bounds, footprint_area, aabb_clearance, ring_positions,
    pad_world_center, pad_bounds,
)
from .models import (
    PackComponent, PackInput, PackedComponent, PackResult,
    VALID_ROTATIONS, ORDER_STRATEGIES, PLACEMENT_STRATEGIES,
    RING_SAMPLES_PER_SIDE, GAP_EPS,
)
from .scoring import NetworkPads, score_candidate


log = logging.getLogger(__name__)


def validate_pack_input(pack_input: PackInput) -> list[str]:
    """Check a PackInput. Returns error messages (empty = valid)."""
    errors: list[str] = []
    if pack_input.min_gap < 0:
        errors.append(f"min_gap must be >= 0, got {pack_input.min_gap}")
    if pack_input.order_strategy not in ORDER_STRATEGIES:
        errors.append(f"Unknown order strategy '{pack_input.order_strategy}'")
    if pack_input.placement_strategy not in PLACEMENT_STRATEGIES:
        errors.append(
            f"Unknown placement strategy '{pack_input.placement_strategy}'"
        )
    seen: set[str] = set()
    for comp in pack_input.components:
        if comp.component_id in seen:
            errors.append(f"Duplicate component id '{comp.component_id}'")
        seen.add(comp.component_id)
        if not comp.available_rotations:
            errors.append(f"Component '{comp.component_id}': no available rotations")
        for rot in comp.available_rotations:
            if rot not in VALID_ROTATIONS:
                errors.append(
                    f"Component '{comp.component_id}': unsupported rotation {rot}"
                )
    return errors


def order_components(pack_input: PackInput) -> list[PackComponent]:
    """Placement order for the chosen strategy (stable on ties)."""
    if pack_input.order_strategy == "input_order":
        return list(pack_input.components)
    return sorted(pack_input.components, key=lambda c: -footprint_area(c))


class PackSolver(BaseSolver):
    """Places one component per step."""

    kind = SolverKind.PACK

    def __init__(
        self,
        pack_input: PackInput,
        *,
        max_iterations: int | None = None,
        clock=None,
    ) -> None:
        super().__init__(max_iterations=max_iterations, clock=clock)
        self.pack_input = pack_input
        self.packed: list[PackedComponent] = []
        self._queue: list[PackComponent] | None = None
        self._boxes: list[Bounds] = []
        self._network_pads: NetworkPads = {}
        self._components = {c.component_id: c for c in pack_input.components}

    def _step(self) -> None:
        if self._queue is None:
            errors = validate_pack_input(self.pack_input)
            if errors:
                raise PackError("; ".join(errors))
            self._queue = order_components(self.pack_input)

        if not self._queue:
            self.solved = True
            return

        comp = self._queue.pop(0)
        center, rotation = self._best_position(comp)
        self._commit(comp, center, rotation)
        if not self._queue:
            self.solved = True
            log.debug("Packed %d components (gap=%.2f)",
                      len(self.packed), self.pack_input.min_gap)

    # ── Placement search ───────────────────────────────────────────

    def _best_position(
        self, comp: PackComponent,
    ) -> tuple[tuple[float, float], int]:
        if not self.packed:
            return (0.0, 0.0), comp.available_rotations[0]

        gap = self.pack_input.min_gap
        centroid = (
            sum(p.center[0] for p in self.packed) / len(self.packed),
            sum(p.center[1] for p in self.packed) / len(self.packed),
        )
        global_box = union_bounds(self._boxes)

        best: tuple[tuple[float, float], int] | None = None
        best_score = float("inf")

        for rotation in comp.available_rotations:
            local = footprint_bounds(comp, (0.0, 0.0), rotation)
            for center in self._candidates(comp, rotation, local, global_box):
                box = (
                    center[0] + local[0], center[1] + local[1],
                    center[0] + local[2], center[1] + local[3],
                )
                # Hard constraint: min gap to every placed footprint
                if any(
                    aabb_clearance(box, placed) < gap - GAP_EPS
                    for placed in self._boxes
                ):
                    continue
                pad_positions = [
                    (pad.network_id, pad_world_center(pad, center, rotation))
                    for pad in comp.pads
                ]
                score = score_candidate(
                    center, pad_positions, self._network_pads, centroid,
                    self.pack_input.placement_strategy,
                )
                if score < best_score:
                    best_score = score
                    best = (center, rotation)

        if best is None:
            # Unreachable: the global ring is always clear.
            raise PackError(f"No legal position for '{comp.component_id}'")
        return best

    def _candidates(
        self,
        comp: PackComponent,
        rotation: int,
        local: Bounds,
        global_box: Bounds,
    ) -> list[tuple[float, float]]:
        gap = self.pack_input.min_gap
        candidates: list[tuple[float, float]] = []
        for box in self._boxes:
            candidates.extend(
                ring_positions(box, local, gap, RING_SAMPLES_PER_SIDE)
            )

        # Line a pad up with a placed pad on the same network, just
        # outside the placed component's footprint.
        for pad in comp.pads:
            others = self._network_pads.get(pad.network_id)
            if not others:
                continue
            ox, oy = pad_world_center(pad, (0.0, 0.0), rotation)
            for placed, box in zip(self.packed, self._boxes):
                for tx, ty in self._placed_pads_on(placed, pad.network_id):
                    candidates.append((tx - ox, box[3] + gap - local[1]))
                    candidates.append((tx - ox, box[1] - gap - local[3]))
                    candidates.append((box[2] + gap - local[0], ty - oy))
                    candidates.append((box[0] - gap - local[2], ty - oy))

        candidates.extend(
            ring_positions(global_box, local, gap, RING_SAMPLES_PER_SIDE)
        )
        return candidates

    def _placed_pads_on(
        self, placed: PackedComponent, network_id: str,
    ) -> list[tuple[float, float]]:
        comp = self._components[placed.component_id]
        return [
            pad_world_center(pad, placed.center, placed.ccw_rotation_degrees)
            for pad in comp.pads
            if pad.network_id == network_id
        ]

    def _commit(
        self, comp: PackComponent, center: tuple[float, float], rotation: int,
    ) -> None:
        self.packed.append(PackedComponent(
            component_id=comp.component_id,
            center=center,
            ccw_rotation_degrees=rotation,
        ))
        self._boxes.append(footprint_bounds(comp, center, rotation))
        for pad in comp.pads:
            self._network_pads.setdefault(pad.network_id, []).append(
                pad_world_center(pad, center, rotation)
            )
        log.debug("Packed %s at (%.2f, %.2f) rot=%d°",
                  comp.component_id, center[0], center[1], rotation)

    # ── Results / observation ──────────────────────────────────────

    def get_result(self) -> PackResult:
        return PackResult(components=list(self.packed))

    @property
    def progress(self) -> float:
        total = len(self.pack_input.components)
        if self.solved or total == 0:
            return 1.0 if self.solved else 0.0
        return len(self.packed) / total

    def _visualize(self) -> dict:
        graphics = empty_graphics()
        for placed in self.packed:
            comp = self._components[placed.component_id]
            for pad in comp.pads:
                x0, y0, x1, y1 = pad_bounds(
                    pad, placed.center, placed.ccw_rotation_degrees,
                )
                graphics["rects"].append({
                    "center": {"x": (x0 + x1) / 2, "y": (y0 + y1) / 2},
                    "width": x1 - x0,
                    "height": y1 - y0,
                    "fill": get_color_from_string(pad.network_id, 0.5),
                    "label": f"{pad.pad_id}\n{pad.network_id}",
                })
            graphics["texts"].append({
                "x": placed.center[0],
                "y": placed.center[1],
                "text": placed.component_id,
            })
        return graphics

    def get_constructor_params(self) -> dict:
        return {"pack_input": self.pack_input}


def pack(pack_input: PackInput) -> PackResult:
    """Pack every component of *pack_input*.

    Raises
    ------
    PackError
        If the input is invalid or packing fails.
    """
    solver = PackSolver(pack_input)
    solver.solve()
    if solver.failed:
        if isinstance(solver.failure, PackError):
            raise solver.failure
        raise PackError(solver.error or "packing failed")
    return solver.get_result()
