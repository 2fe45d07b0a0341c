"""Unit tests for /fogline/game/deck.py"""

import random
from collections import Counter
from dataclasses import replace

import pytest

from fogline.core.exceptions import InvalidPlacementError, InvalidSetupError
from fogline.core.shared_types import UnitKind
from fogline.game.deck import (
    PlayerPool,
    generate_player_pool,
    initial_pairings,
    validate_pool,
)
from fogline.game.terrain import all_terrain_cards
from fogline.game.units import full_unit_set


def test_pool_has_the_fixed_composition() -> None:
    pool = generate_player_pool(1, random.Random(3))
    assert len(pool.units) == 8
    assert len(pool.terrains) == 8
    assert sorted(u.unit_id for u in pool.units) == sorted(u.unit_id for u in full_unit_set())
    assert sorted(t.index for t in pool.terrains) == list(range(8))
    validate_pool(pool)


def test_seeded_rng_gives_the_same_pool() -> None:
    assert generate_player_pool(1, random.Random(11)) == generate_player_pool(1, random.Random(11))


def test_units_and_terrains_are_shuffled_independently() -> None:
    """Over many deals the i-th unit is not tied to the i-th terrain"""
    pairs_seen = set()
    for seed in range(50):
        pool = generate_player_pool(1, random.Random(seed))
        pairs_seen.add((pool.units[0].unit_id, pool.terrains[0].index))
    assert len(pairs_seen) > 20


def test_no_positional_bias() -> None:
    """Each unit kind shows up first about as often as its share of the pool (1/8 for the Mobile Command)"""
    rng = random.Random(2024)
    first_kinds = Counter(generate_player_pool(1, rng).units[0].kind for _ in range(4000))
    assert 350 < first_kinds[UnitKind.MOBILE_COMMAND] < 650  # expected 500
    assert 1250 < first_kinds[UnitKind.INFANTRY] < 1750  # expected 1500


def test_initial_pairings_are_sorted_by_name_then_instance() -> None:
    pool = generate_player_pool(2, random.Random(5))
    pairings = initial_pairings(pool)
    names = [(p.unit.name, p.unit.instance) for p in pairings]
    assert names == sorted(names)
    assert names[0] == ("Artillery", 1)
    assert names[-1] == ("Tank", 2)


def test_pairings_keep_the_dealt_combination() -> None:
    """The i-th unit was dealt with the i-th terrain"""
    pool = generate_player_pool(1, random.Random(8))
    dealt = dict(zip((u.unit_id for u in pool.units), pool.terrains))
    for pairing in initial_pairings(pool):
        assert dealt[pairing.unit.unit_id] == pairing.terrain


def test_pool_from_pairings_has_same_cards() -> None:
    pool = generate_player_pool(1, random.Random(9))
    rebuilt = PlayerPool.from_pairings(initial_pairings(pool))
    assert sorted(u.unit_id for u in rebuilt.units) == sorted(u.unit_id for u in pool.units)
    assert sorted(t.index for t in rebuilt.terrains) == list(range(8))


def test_take_removes_the_pair() -> None:
    pool = PlayerPool(full_unit_set(), all_terrain_cards())
    unit, terrain = pool.take("tank-2", 5)
    assert unit.unit_id == "tank-2"
    assert terrain.index == 5
    assert pool.find_unit("tank-2") is None
    assert pool.find_terrain(5) is None
    assert len(pool.units) == len(pool.terrains) == 7


@pytest.mark.parametrize("unit_id, terrain_index", [("tank-3", 0), ("tank-1", 9)])
def test_take_is_all_or_nothing(unit_id: str, terrain_index: int) -> None:
    """A failed take leaves the pool as it was"""
    pool = PlayerPool(full_unit_set(), all_terrain_cards())
    with pytest.raises(InvalidPlacementError):
        pool.take(unit_id, terrain_index)
    assert len(pool.units) == len(pool.terrains) == 8


def test_invalid_pools_are_rejected() -> None:
    units = full_unit_set()
    terrains = all_terrain_cards()

    # one unit missing
    with pytest.raises(InvalidSetupError):
        validate_pool(PlayerPool(units[:-1], terrains))

    # duplicated terrain
    with pytest.raises(InvalidSetupError):
        validate_pool(PlayerPool(units, terrains[:-1] + [terrains[0]]))

    # boosted stats
    boosted = [replace(units[0], defense=99)] + units[1:]
    with pytest.raises(InvalidSetupError):
        validate_pool(PlayerPool(boosted, terrains))
