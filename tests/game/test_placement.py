"""Unit tests for /fogline/game/placement.py"""

import random

import pytest

from fogline.core.exceptions import AutoPlacementError
from fogline.game.deck import PlayerPool, generate_player_pool
from fogline.game.placement import (
    ORIGIN,
    TOTAL_CARD_PAIRS,
    compute_legal_spots,
    generate_auto_placements,
    other_player,
    placement_turn_player,
)
from fogline.game.tile import Coordinate


def test_first_card_goes_on_the_origin() -> None:
    assert compute_legal_spots(set()) == {Coordinate(10, 10)} == {ORIGIN}


def test_frontier_around_one_card() -> None:
    assert compute_legal_spots({ORIGIN}) == {
        Coordinate(11, 10),
        Coordinate(9, 10),
        Coordinate(10, 11),
        Coordinate(10, 9),
    }


@pytest.mark.parametrize(
    "occupied, expected_size",
    [
        ({(10, 10), (11, 10)}, 6),
        ({(10, 10), (11, 10), (12, 10)}, 8),
        ({(10, 10), (11, 10), (10, 11), (11, 11)}, 8),
        ({(10, 10), (11, 10), (11, 11)}, 7),
    ],
)
def test_frontier_size(occupied: set[tuple[int, int]], expected_size: int) -> None:
    spots = compute_legal_spots({Coordinate(x, y) for x, y in occupied})
    assert len(spots) == expected_size


def test_frontier_spots_are_empty_and_touch_the_board() -> None:
    """No diagonals: every legal spot shares a full edge with a placed card"""
    occupied = {Coordinate(10, 10), Coordinate(11, 10), Coordinate(11, 11), Coordinate(8, 10)}
    spots = compute_legal_spots(occupied)
    assert Coordinate(12, 12) not in spots
    for spot in spots:
        assert spot not in occupied
        assert any(neighbor in occupied for neighbor in spot.neighbors())


def test_strict_alternation() -> None:
    assert [placement_turn_player(turn) for turn in range(6)] == [1, 2, 1, 2, 1, 2]
    assert other_player(1) == 2
    assert other_player(2) == 1


def test_auto_placement_builds_a_connected_board() -> None:
    pools = [generate_player_pool(p, random.Random(p)) for p in (1, 2)]
    actions = generate_auto_placements(*pools, rng=random.Random(4))

    assert len(actions) == TOTAL_CARD_PAIRS == 16
    assert actions[0].position == ORIGIN
    assert [a.owner for a in actions] == [1, 2] * 8
    assert [a.card_id for a in actions] == list(range(16))
    assert len({a.position for a in actions}) == 16

    placed: set[Coordinate] = set()
    for action in actions:
        assert action.position in compute_legal_spots(placed)
        placed.add(action.position)


def test_auto_placement_uses_pairs_in_pool_order() -> None:
    pools = [generate_player_pool(p, random.Random(10 + p)) for p in (1, 2)]
    actions = generate_auto_placements(*pools, starting_card_id=3, rng=random.Random(0))

    p1_actions = [a for a in actions if a.owner == 1]
    assert [a.unit for a in p1_actions] == pools[0].units
    assert [a.terrain for a in p1_actions] == pools[0].terrains
    assert actions[0].card_id == 3
    # the pools themselves are untouched
    assert len(pools[0].units) == 8


def test_auto_placement_is_reproducible() -> None:
    pools = [generate_player_pool(p, random.Random(p)) for p in (1, 2)]
    first = generate_auto_placements(*pools, rng=random.Random(99))
    second = generate_auto_placements(*pools, rng=random.Random(99))
    assert first == second


def test_auto_placement_fails_on_short_pool() -> None:
    full = generate_player_pool(1, random.Random(1))
    short = PlayerPool(full.units[:5], full.terrains[:5])
    with pytest.raises(AutoPlacementError):
        generate_auto_placements(full, short, rng=random.Random(1))
