"""Problem dataclasses: chips, pins, groups, nets and their connections."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping


Side = str      # "x-" | "x+" | "y-" | "y+"
SIDES: tuple[Side, ...] = ("x-", "x+", "y-", "y+")
FREE_ROTATIONS: tuple[int, ...] = (0, 90, 180, 270)

Bounds = tuple[float, float, float, float]      # (min_x, min_y, max_x, max_y)


@dataclass(frozen=True)
class ChipPin:
    pin_id: str
    offset: tuple[float, float]     # relative to the owning chip's center
    side: Side


@dataclass(frozen=True)
class Chip:
    chip_id: str
    pin_ids: tuple[str, ...]
    size: tuple[float, float]       # (width, height)
    available_rotations: tuple[int, ...] | None = None     # None = free

    @property
    def width(self) -> float:
        return self.size[0]

    @property
    def height(self) -> float:
        return self.size[1]

    @property
    def rotations(self) -> tuple[int, ...]:
        """Allowed rotations, falling back to free rotation."""
        return self.available_rotations or FREE_ROTATIONS


@dataclass(frozen=True)
class GroupPin:
    pin_id: str
    offset: tuple[float, float]


@dataclass(frozen=True)
class Group:
    """A cluster of pins with no chip body of its own.

    ``shapes`` are the bounding boxes the group occupies, relative to
    the group's center.
    """
    group_id: str
    pin_ids: tuple[str, ...]
    shapes: tuple[Bounds, ...] = ()


@dataclass(frozen=True)
class Net:
    net_id: str


@dataclass(frozen=True)
class InputProblem:
    """Immutable layout problem.

    ``pin_strong_conn_map`` is keyed by ``(pin_a, pin_b)`` and is stored
    in both directions.  ``net_conn_map`` is keyed by ``(pin_id, net_id)``.
    Every mapping is copied into a read-only view on construction, so
    the caller's dicts are never aliased.
    """

    chip_map: Mapping[str, Chip]
    chip_pin_map: Mapping[str, ChipPin]
    group_map: Mapping[str, Group] = field(default_factory=dict)
    group_pin_map: Mapping[str, GroupPin] = field(default_factory=dict)
    net_map: Mapping[str, Net] = field(default_factory=dict)
    pin_strong_conn_map: Mapping[tuple[str, str], bool] = field(default_factory=dict)
    net_conn_map: Mapping[tuple[str, str], bool] = field(default_factory=dict)
    chip_gap: float = 0.2
    partition_gap: float = 2.0

    _pin_to_chip: Mapping[str, str] = field(
        init=False, repr=False, compare=False, default_factory=dict,
    )
    _pin_to_group: Mapping[str, str] = field(
        init=False, repr=False, compare=False, default_factory=dict,
    )

    def __post_init__(self) -> None:
        for name in (
            "chip_map", "chip_pin_map", "group_map", "group_pin_map",
            "net_map", "pin_strong_conn_map", "net_conn_map",
        ):
            object.__setattr__(
                self, name, MappingProxyType(dict(getattr(self, name))),
            )

        # Precomputed owner indexes (first owner wins).
        pin_to_chip: dict[str, str] = {}
        for chip in self.chip_map.values():
            for pin_id in chip.pin_ids:
                pin_to_chip.setdefault(pin_id, chip.chip_id)
        pin_to_group: dict[str, str] = {}
        for group in self.group_map.values():
            for pin_id in group.pin_ids:
                pin_to_group.setdefault(pin_id, group.group_id)
        object.__setattr__(self, "_pin_to_chip", MappingProxyType(pin_to_chip))
        object.__setattr__(self, "_pin_to_group", MappingProxyType(pin_to_group))

    # ── Lookups ────────────────────────────────────────────────────

    def owner_chip(self, pin_id: str) -> str | None:
        return self._pin_to_chip.get(pin_id)

    def owner_group(self, pin_id: str) -> str | None:
        return self._pin_to_group.get(pin_id)

    def chip_pins(self, chip_id: str) -> list[ChipPin]:
        """Resolved pins of a chip, skipping ids missing from the pin map."""
        chip = self.chip_map[chip_id]
        return [
            self.chip_pin_map[pid] for pid in chip.pin_ids
            if pid in self.chip_pin_map
        ]

    def group_pins(self, group_id: str) -> list[GroupPin]:
        group = self.group_map[group_id]
        return [
            self.group_pin_map[pid] for pid in group.pin_ids
            if pid in self.group_pin_map
        ]

    def is_strongly_connected(self, pin_a: str, pin_b: str) -> bool:
        return bool(
            self.pin_strong_conn_map.get((pin_a, pin_b))
            or self.pin_strong_conn_map.get((pin_b, pin_a))
        )

    def strong_connections(self) -> Iterator[tuple[str, str]]:
        """Every true strong entry, in stored order (both directions)."""
        for key, connected in self.pin_strong_conn_map.items():
            if connected:
                yield key

    def net_connections(self) -> Iterator[tuple[str, str]]:
        """Every true ``(pin_id, net_id)`` entry, in stored order."""
        for key, connected in self.net_conn_map.items():
            if connected:
                yield key

    def has_strong_connections(self) -> bool:
        return any(self.pin_strong_conn_map.values())

    @property
    def all_pin_ids(self) -> set[str]:
        return set(self.chip_pin_map) | set(self.group_pin_map)
