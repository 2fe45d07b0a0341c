"""
Generates the unit/terrain pools at the start of a game.

Only the initiating peer calls `generate_player_pool`. The other peer receives the result and must use it as is.
"""

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Self

from fogline.core.exceptions import InvalidPlacementError, InvalidSetupError
from fogline.game.terrain import TERRAIN_LAYOUTS, TerrainCard, all_terrain_cards
from fogline.game.units import UnitInstance, full_unit_set


@dataclass(frozen=True)
class Pairing:
    """A unit and the terrain it was dealt with. Shown in the memo pad."""

    unit: UnitInstance
    terrain: TerrainCard


@dataclass
class PlayerPool:
    """Cards a player still has to place. Both lists shrink by one on every placement."""

    units: list[UnitInstance] = field(default_factory=list)
    terrains: list[TerrainCard] = field(default_factory=list)

    @classmethod
    def from_pairings(cls, pairings: list[Pairing]) -> Self:
        return cls(
            units=[pairing.unit for pairing in pairings],
            terrains=[pairing.terrain for pairing in pairings],
        )

    def is_empty(self) -> bool:
        return not self.units and not self.terrains

    def find_unit(self, unit_id: str) -> Optional[UnitInstance]:
        return next((unit for unit in self.units if unit.unit_id == unit_id), None)

    def find_terrain(self, terrain_index: int) -> Optional[TerrainCard]:
        return next((t for t in self.terrains if t.index == terrain_index), None)

    def take(self, unit_id: str, terrain_index: int) -> tuple[UnitInstance, TerrainCard]:
        """Remove the pair from the pool. Nothing is removed if either one is missing."""
        unit = self.find_unit(unit_id)
        terrain = self.find_terrain(terrain_index)
        if unit is None:
            raise InvalidPlacementError(f"Unit {unit_id!r} is not in the remaining pool.")
        if terrain is None:
            raise InvalidPlacementError(
                f"Terrain #{terrain_index + 1} is not in the remaining pool."
            )
        self.units.remove(unit)
        self.terrains.remove(terrain)
        return unit, terrain


def generate_player_pool(player: int, rng: Optional[random.Random] = None) -> PlayerPool:
    """
    Fixed multiset of 8 units and the 8 terrain layouts, each list shuffled independently.

    `player` only matters for logging/debugging. Both players get the same cards, in their own random order.
    """
    rng = rng or random.Random()
    units = full_unit_set()
    terrains = all_terrain_cards()
    rng.shuffle(units)
    rng.shuffle(terrains)
    return PlayerPool(units, terrains)


def initial_pairings(pool: PlayerPool) -> list[Pairing]:
    """The i-th unit goes with the i-th terrain. Sorted by unit name, then instance (memo pad order)."""
    pairings = [Pairing(unit, terrain) for unit, terrain in zip(pool.units, pool.terrains)]
    return sorted(pairings, key=lambda pairing: (pairing.unit.name, pairing.unit.instance))


def validate_pool(pool: PlayerPool) -> None:
    """A pool sent by the opponent must have exactly the fixed composition."""
    expected_units = Counter(unit.unit_id for unit in full_unit_set())
    if Counter(unit.unit_id for unit in pool.units) != expected_units:
        raise InvalidSetupError("Unit pool does not contain the fixed set of 8 units.")
    if not all(unit.matches_catalog() for unit in pool.units):
        raise InvalidSetupError("Unit pool contains units with unknown stats.")

    if sorted(terrain.index for terrain in pool.terrains) != list(range(len(TERRAIN_LAYOUTS))):
        raise InvalidSetupError("Terrain pool does not contain the 8 fixed layouts.")
    if not all(terrain.matches_catalog() for terrain in pool.terrains):
        raise InvalidSetupError("Terrain pool contains an unknown layout.")
