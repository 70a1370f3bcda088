"""Chip partitioning: split a problem into strongly-connected components.

Two chips are adjacent when any pin of one is strongly connected to any
pin of the other.  Each connected component of that graph becomes an
independent partition: a filtered copy of the problem that keeps only
the component's chips, their pins, and the connections among them.

Ordering:
  Components are discovered in chip-map order.  Within a component the
  depth-first walk visits neighbours in insertion order (adjacency sets
  are insertion-ordered dicts), so results are reproducible.
"""

from __future__ import annotations

import logging

from schematic_layout.core.graphics import stack_graphics_horizontally
from schematic_layout.core.solver import BaseSolver, SolverKind
from schematic_layout.pipeline.basic_layout import basic_layout
from schematic_layout.pipeline.problem.models import InputProblem
from schematic_layout.pipeline.visualize import visualize_input_problem


log = logging.getLogger(__name__)

# chip id -> neighbouring chip ids (dict used as an ordered set)
ChipAdjacency = dict[str, dict[str, None]]


def build_chip_adjacency(problem: InputProblem) -> ChipAdjacency:
    """Undirected chip graph induced by true strong connections.

    Pins without a resolvable owning chip contribute no edge.
    """
    adjacency: ChipAdjacency = {chip_id: {} for chip_id in problem.chip_map}
    for a, b in problem.strong_connections():
        chip_a = problem.owner_chip(a)
        chip_b = problem.owner_chip(b)
        if chip_a is None or chip_b is None or chip_a == chip_b:
            continue
        adjacency[chip_a][chip_b] = None
        adjacency[chip_b][chip_a] = None
    return adjacency


def find_connected_components(adjacency: ChipAdjacency) -> list[list[str]]:
    """Connected components via iterative (explicit-stack) DFS."""
    visited: set[str] = set()
    components: list[list[str]] = []
    for start in adjacency:
        if start in visited:
            continue
        component: list[str] = []
        stack = [start]
        while stack:
            chip_id = stack.pop()
            if chip_id in visited:
                continue
            visited.add(chip_id)
            component.append(chip_id)
            for neighbour in adjacency[chip_id]:
                if neighbour not in visited:
                    stack.append(neighbour)
        components.append(component)
    return components


def _assign_groups(
    problem: InputProblem, components: list[list[str]],
) -> list[list[str]]:
    """Group ids per component.

    A group joins the component of the first chip its pins are strongly
    connected to, otherwise the first component.
    """
    chip_to_component = {
        chip_id: i for i, comp in enumerate(components) for chip_id in comp
    }
    partners: dict[str, list[str]] = {}
    for a, b in problem.strong_connections():
        partners.setdefault(a, []).append(b)

    assigned: list[list[str]] = [[] for _ in components]
    for group_id, group in problem.group_map.items():
        target = 0
        for pin_id in group.pin_ids:
            hits = [
                chip_to_component[chip_id]
                for chip_id in map(problem.owner_chip, partners.get(pin_id, []))
                if chip_id is not None
            ]
            if hits:
                target = hits[0]
                break
        assigned[target].append(group_id)
    return assigned


def filter_problem(
    problem: InputProblem,
    chip_ids: list[str],
    group_ids: list[str] | None = None,
) -> InputProblem:
    """New problem restricted to *chip_ids* / *group_ids*.

    Strong entries survive when both pins are inside; weak entries when
    their pin is inside, carrying along the nets they reference.
    """
    chip_map = {cid: problem.chip_map[cid] for cid in chip_ids}
    group_map = {gid: problem.group_map[gid] for gid in group_ids or []}

    chip_pin_ids = {pid for chip in chip_map.values() for pid in chip.pin_ids}
    group_pin_ids = {pid for group in group_map.values() for pid in group.pin_ids}
    pin_ids = chip_pin_ids | group_pin_ids

    net_conn_map = {
        key: connected for key, connected in problem.net_conn_map.items()
        if key[0] in pin_ids
    }
    net_map = {}
    for _pin_id, net_id in net_conn_map:
        if net_id in problem.net_map:
            net_map.setdefault(net_id, problem.net_map[net_id])

    return InputProblem(
        chip_map=chip_map,
        chip_pin_map={
            pid: pin for pid, pin in problem.chip_pin_map.items()
            if pid in chip_pin_ids
        },
        group_map=group_map,
        group_pin_map={
            pid: pin for pid, pin in problem.group_pin_map.items()
            if pid in group_pin_ids
        },
        net_map=net_map,
        pin_strong_conn_map={
            key: connected for key, connected in problem.pin_strong_conn_map.items()
            if key[0] in pin_ids and key[1] in pin_ids
        },
        net_conn_map=net_conn_map,
        chip_gap=problem.chip_gap,
        partition_gap=problem.partition_gap,
    )


def partition_problem(problem: InputProblem) -> list[InputProblem]:
    """Split *problem* into one filtered copy per connected component."""
    components = find_connected_components(build_chip_adjacency(problem))
    if not components:
        if not problem.group_map:
            return []
        return [filter_problem(problem, [], list(problem.group_map))]
    groups = _assign_groups(problem, components)
    return [
        filter_problem(problem, comp, group_ids)
        for comp, group_ids in zip(components, groups)
    ]


class ChipPartitionsSolver(BaseSolver):
    """Computes every partition in a single step."""

    kind = SolverKind.CHIP_PARTITIONS

    def __init__(self, problem: InputProblem, **kwargs) -> None:
        super().__init__(**kwargs)
        self.problem = problem
        self.partitions: list[InputProblem] = []

    def _step(self) -> None:
        self.partitions = partition_problem(self.problem)
        self.solved = True
        log.info("Split %d chips into %d partitions",
                 len(self.problem.chip_map), len(self.partitions))
        for i, part in enumerate(self.partitions):
            log.debug("Partition %d: %s", i, ", ".join(part.chip_map))

    def _visualize(self) -> dict:
        return stack_graphics_horizontally(
            [visualize_input_problem(p, basic_layout(p)) for p in self.partitions],
            titles=[f"partition{i}" for i in range(len(self.partitions))],
        )

    def get_constructor_params(self) -> dict:
        return {"problem": self.problem}
