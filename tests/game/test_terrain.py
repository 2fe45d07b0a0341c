"""Unit tests for /fogline/game/terrain.py"""

import pytest

from fogline.core.shared_types import EdgeType, Side
from fogline.game.terrain import (
    TERRAIN_LAYOUTS,
    TerrainCard,
    all_terrain_cards,
    defense_bonus,
)


def test_eight_distinct_layouts() -> None:
    cards = all_terrain_cards()
    assert len(cards) == 8
    assert [card.index for card in cards] == list(range(8))
    assert len(set(TERRAIN_LAYOUTS)) == 8


@pytest.mark.parametrize("card", all_terrain_cards())
def test_every_layout_has_a_plains_edge(card: TerrainCard) -> None:
    """Otherwise tanks could never leave (or enter) the tile"""
    edges = card.edges().values()
    assert EdgeType.PLAINS in edges
    assert set(edges) != {EdgeType.MOUNTAIN}


def test_edge_lookup_by_side() -> None:
    card = TerrainCard.from_layout(4)  # forest, forest, plains, mountain
    assert card.edge(Side.TOP) == EdgeType.FOREST
    assert card.edge(Side.RIGHT) == EdgeType.FOREST
    assert card.edge(Side.BOTTOM) == EdgeType.PLAINS
    assert card.edge(Side.LEFT) == EdgeType.MOUNTAIN


@pytest.mark.parametrize(
    "edge, bonus",
    [(EdgeType.PLAINS, 0), (EdgeType.FOREST, 1), (EdgeType.MOUNTAIN, 0)],
)
def test_defense_bonus(edge: EdgeType, bonus: int) -> None:
    assert defense_bonus(edge) == bonus


def test_unknown_layout_does_not_match_catalog() -> None:
    assert TerrainCard.from_layout(3).matches_catalog()
    assert not TerrainCard(3, *([EdgeType.MOUNTAIN] * 4)).matches_catalog()
    assert not TerrainCard(8, *TERRAIN_LAYOUTS[0]).matches_catalog()
