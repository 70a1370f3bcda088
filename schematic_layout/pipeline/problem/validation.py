"""Problem validation: structural checks on an InputProblem."""

from __future__ import annotations

from .models import FREE_ROTATIONS, InputProblem


def validate_problem(problem: InputProblem) -> list[str]:
    """Check every reference in *problem*. Returns error messages (empty = valid)."""
    errors: list[str] = []

    # ── Chip pins must exist and be owned once ──
    owners: dict[str, str] = {}
    for chip in problem.chip_map.values():
        if chip.width <= 0 or chip.height <= 0:
            errors.append(
                f"Chip '{chip.chip_id}': size must be positive, got {chip.size}"
            )
        if chip.available_rotations is not None:
            if not chip.available_rotations:
                errors.append(f"Chip '{chip.chip_id}': empty available_rotations")
            for rot in chip.available_rotations:
                if rot not in FREE_ROTATIONS:
                    errors.append(
                        f"Chip '{chip.chip_id}': unsupported rotation {rot}"
                    )
        for pin_id in chip.pin_ids:
            if pin_id not in problem.chip_pin_map:
                errors.append(f"Chip '{chip.chip_id}': unknown pin '{pin_id}'")
            if pin_id in owners:
                errors.append(
                    f"Pin '{pin_id}' owned by both '{owners[pin_id]}' "
                    f"and '{chip.chip_id}'"
                )
            else:
                owners[pin_id] = chip.chip_id

    # ── Group pins ──
    for group in problem.group_map.values():
        for pin_id in group.pin_ids:
            if pin_id not in problem.group_pin_map:
                errors.append(f"Group '{group.group_id}': unknown pin '{pin_id}'")
            if pin_id in owners:
                errors.append(
                    f"Pin '{pin_id}' owned by both '{owners[pin_id]}' "
                    f"and '{group.group_id}'"
                )
            else:
                owners[pin_id] = group.group_id

    # ── Strong connections reference known pins, stored both ways ──
    known_pins = problem.all_pin_ids
    for (a, b), connected in problem.pin_strong_conn_map.items():
        for pin_id in (a, b):
            if pin_id not in known_pins:
                errors.append(f"Strong connection {a}-{b}: unknown pin '{pin_id}'")
        if connected and not problem.pin_strong_conn_map.get((b, a)):
            errors.append(f"Strong connection {a}-{b} is missing its reverse entry")

    # ── Weak connections reference known pins and nets ──
    for pin_id, net_id in problem.net_conn_map:
        if pin_id not in known_pins:
            errors.append(f"Net connection {pin_id}/{net_id}: unknown pin '{pin_id}'")
        if net_id not in problem.net_map:
            errors.append(f"Net connection {pin_id}/{net_id}: unknown net '{net_id}'")

    # ── Spacing ──
    if problem.chip_gap < 0:
        errors.append(f"chip_gap must be >= 0, got {problem.chip_gap}")
    if problem.partition_gap < 0:
        errors.append(f"partition_gap must be >= 0, got {problem.partition_gap}")

    return errors
