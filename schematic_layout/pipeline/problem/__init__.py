"""Layout problem: dataclasses, parsing, validation, and serialization."""

from .models import (
    Side, SIDES, FREE_ROTATIONS, Bounds,
    ChipPin, Chip, GroupPin, Group, Net, InputProblem,
)
from .parsing import parse_problem, normalize_side
from .validation import validate_problem
from .serialization import problem_to_dict

__all__ = [
    # Models
    "Side", "SIDES", "FREE_ROTATIONS", "Bounds",
    "ChipPin", "Chip", "GroupPin", "Group", "Net", "InputProblem",
    # Parsing / Validation / Serialization
    "parse_problem", "normalize_side", "validate_problem", "problem_to_dict",
]
