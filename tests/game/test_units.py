"""Unit tests for /fogline/game/units.py"""

from collections import Counter
from dataclasses import replace

import pytest

from fogline.core.shared_types import EdgeType, UnitKind
from fogline.game.units import (
    UNIT_STATS,
    UNITS_PER_PLAYER,
    UnitInstance,
    can_traverse,
    full_unit_set,
)


def test_every_player_gets_eight_units() -> None:
    units = full_unit_set()
    assert UNITS_PER_PLAYER == 8
    assert len(units) == 8
    assert Counter(unit.kind for unit in units) == {
        UnitKind.MOBILE_COMMAND: 1,
        UnitKind.TANK: 2,
        UnitKind.INFANTRY: 3,
        UnitKind.ARTILLERY: 1,
        UnitKind.SPECIAL_OPS: 1,
    }


def test_instance_numbers_are_unique_per_kind() -> None:
    unit_ids = [unit.unit_id for unit in full_unit_set()]
    assert len(set(unit_ids)) == 8
    assert "infantry-3" in unit_ids
    assert "tank-2" in unit_ids


@pytest.mark.parametrize(
    "kind, attack, defense",
    [
        (UnitKind.MOBILE_COMMAND, 1, 2),
        (UnitKind.TANK, 4, 4),
        (UnitKind.INFANTRY, 3, 3),
        (UnitKind.ARTILLERY, 5, 1),
        (UnitKind.SPECIAL_OPS, 3, 1),
    ],
)
def test_unit_stats(kind: UnitKind, attack: int, defense: int) -> None:
    unit = UnitInstance.create(kind, 1)
    assert unit.attack == attack
    assert unit.defense == defense
    assert unit.name == UNIT_STATS[kind].name


@pytest.mark.parametrize("kind", [k for k in UnitKind])
def test_everyone_crosses_plains(kind: UnitKind) -> None:
    assert can_traverse(UnitInstance.create(kind, 1), EdgeType.PLAINS)


@pytest.mark.parametrize(
    "kind, rough_terrain_allowed",
    [
        (UnitKind.MOBILE_COMMAND, False),
        (UnitKind.TANK, False),
        (UnitKind.INFANTRY, True),
        (UnitKind.ARTILLERY, False),
        (UnitKind.SPECIAL_OPS, True),
    ],
)
def test_only_infantry_and_special_ops_cross_forest_and_mountain(
    kind: UnitKind, rough_terrain_allowed: bool
) -> None:
    unit = UnitInstance.create(kind, 1)
    assert can_traverse(unit, EdgeType.FOREST) == rough_terrain_allowed
    assert can_traverse(unit, EdgeType.MOUNTAIN) == rough_terrain_allowed


def test_only_command_is_command() -> None:
    assert UnitInstance.create(UnitKind.MOBILE_COMMAND, 1).is_command
    assert not any(
        unit.is_command for unit in full_unit_set() if unit.kind != UnitKind.MOBILE_COMMAND
    )


def test_tampered_unit_does_not_match_catalog() -> None:
    """A unit with boosted stats, or a fourth infantry, is not a unit of the game"""
    tank = UnitInstance.create(UnitKind.TANK, 1)
    assert tank.matches_catalog()
    assert not replace(tank, attack=9).matches_catalog()
    assert not UnitInstance.create(UnitKind.INFANTRY, 4).matches_catalog()
