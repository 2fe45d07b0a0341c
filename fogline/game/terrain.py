"""The 8 fixed terrain layouts and the terrain rules"""

from dataclasses import dataclass
from typing import Self

from fogline.core.shared_types import EdgeType, Side

P = EdgeType.PLAINS
F = EdgeType.FOREST
M = EdgeType.MOUNTAIN

# (top, right, bottom, left). Same 8 layouts for both players.
TERRAIN_LAYOUTS: tuple[tuple[EdgeType, EdgeType, EdgeType, EdgeType], ...] = (
    (P, F, P, F),
    (P, M, P, M),
    (F, P, F, P),
    (M, P, M, P),
    (F, F, P, M),
    (M, M, P, F),
    (F, M, F, P),
    (M, F, M, P),
)

DEFENSE_BONUS: dict[EdgeType, int] = {
    EdgeType.PLAINS: 0,
    EdgeType.FOREST: 1,
    EdgeType.MOUNTAIN: 0,
}


@dataclass(frozen=True)
class TerrainCard:
    index: int
    top: EdgeType
    right: EdgeType
    bottom: EdgeType
    left: EdgeType

    @classmethod
    def from_layout(cls, index: int) -> Self:
        top, right, bottom, left = TERRAIN_LAYOUTS[index]
        return cls(index, top, right, bottom, left)

    def edge(self, side: Side) -> EdgeType:
        return getattr(self, side.value)

    def edges(self) -> dict[Side, EdgeType]:
        return {side: self.edge(side) for side in Side}

    def matches_catalog(self) -> bool:
        return 0 <= self.index < len(TERRAIN_LAYOUTS) and self == TerrainCard.from_layout(
            self.index
        )


def defense_bonus(edge: EdgeType) -> int:
    """Bonus for the defender when the attack crosses this edge"""
    return DEFENSE_BONUS[edge]


def all_terrain_cards() -> list[TerrainCard]:
    return [TerrainCard.from_layout(index) for index in range(len(TERRAIN_LAYOUTS))]
