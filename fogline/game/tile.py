"""
A position on the (unbounded) grid

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fogline.core.shared_types import Side

Vector = tuple[int, int]

# Grid y grows downwards (as on screen): a step of (0, 1) goes towards the bottom edge.
STEP_TO_SIDE: dict[Vector, Side] = {
    (1, 0): Side.RIGHT,
    (-1, 0): Side.LEFT,
    (0, 1): Side.BOTTOM,
    (0, -1): Side.TOP,
}

OPPOSITE_SIDE: dict[Side, Side] = {
    Side.TOP: Side.BOTTOM,
    Side.BOTTOM: Side.TOP,
    Side.LEFT: Side.RIGHT,
    Side.RIGHT: Side.LEFT,
}


@dataclass(frozen=True, order=True)
class Coordinate:
    x: int
    y: int

    def neighbors(self) -> list[Coordinate]:
        """The four orthogonal neighbours (right, left, bottom, top). Diagonals never count."""
        return [Coordinate(self.x + dx, self.y + dy) for dx, dy in STEP_TO_SIDE]

    def direction_to(self, other: Coordinate) -> Optional[Side]:
        """Side we leave through to reach `other`, or None if it is not exactly one orthogonal step away"""
        return STEP_TO_SIDE.get((other.x - self.x, other.y - self.y))


def entry_side(from_position: Coordinate, to_position: Coordinate) -> Optional[Side]:
    """
    The edge of the target tile that faces the mover.

    Moving right enters through the target's left edge, moving down (y + 1) through its top edge, etc.
    """
    direction = from_position.direction_to(to_position)
    if direction is None:
        return None
    return OPPOSITE_SIDE[direction]
