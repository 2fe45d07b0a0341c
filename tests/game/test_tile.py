"""Unit tests for /fogline/game/tile.py"""

import pytest

from fogline.core.shared_types import Side
from fogline.game.tile import Coordinate, entry_side


def test_four_orthogonal_neighbors() -> None:
    """Only the tiles sharing a full edge count, never the diagonals"""
    neighbors = Coordinate(10, 10).neighbors()
    assert set(neighbors) == {
        Coordinate(11, 10),
        Coordinate(9, 10),
        Coordinate(10, 11),
        Coordinate(10, 9),
    }
    assert Coordinate(11, 11) not in neighbors


@pytest.mark.parametrize(
    "target, direction",
    [
        (Coordinate(6, 5), Side.RIGHT),
        (Coordinate(4, 5), Side.LEFT),
        (Coordinate(5, 6), Side.BOTTOM),  # y grows downwards
        (Coordinate(5, 4), Side.TOP),
    ],
)
def test_direction_to_neighbor(target: Coordinate, direction: Side) -> None:
    assert Coordinate(5, 5).direction_to(target) == direction


@pytest.mark.parametrize(
    "target",
    [Coordinate(5, 5), Coordinate(6, 6), Coordinate(7, 5), Coordinate(5, 3)],
)
def test_no_direction_when_not_one_step(target: Coordinate) -> None:
    """Same tile, diagonal, or two steps away"""
    assert Coordinate(5, 5).direction_to(target) is None
    assert entry_side(Coordinate(5, 5), target) is None


@pytest.mark.parametrize(
    "target, side",
    [
        (Coordinate(6, 5), Side.LEFT),  # moving right enters through the target's left edge
        (Coordinate(4, 5), Side.RIGHT),
        (Coordinate(5, 6), Side.TOP),  # moving down enters through the top edge
        (Coordinate(5, 4), Side.BOTTOM),
    ],
)
def test_entry_side_faces_the_mover(target: Coordinate, side: Side) -> None:
    assert entry_side(Coordinate(5, 5), target) == side
