"""
Placement rules: where the next card pair may go, and the bulk auto placement helper.

Key idea: the board grows as one connected blob. The first card goes on the origin and every later card
must share a full edge with a card already on the board.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from fogline.core.exceptions import AutoPlacementError
from fogline.game.deck import PlayerPool
from fogline.game.terrain import TerrainCard
from fogline.game.tile import Coordinate
from fogline.game.units import UNITS_PER_PLAYER, UnitInstance

logger = logging.getLogger(__name__)

ORIGIN = Coordinate(10, 10)
TOTAL_CARD_PAIRS = 2 * UNITS_PER_PLAYER


@dataclass(frozen=True)
class PlacementAction:
    """Everything needed to replay one placement on either peer"""

    owner: int
    unit: UnitInstance
    terrain: TerrainCard
    position: Coordinate
    card_id: int


def compute_legal_spots(occupied: set[Coordinate]) -> set[Coordinate]:
    """The placement frontier: empty orthogonal neighbours of occupied tiles (or just the origin)"""
    if not occupied:
        return {ORIGIN}
    return {
        neighbor
        for position in occupied
        for neighbor in position.neighbors()
        if neighbor not in occupied
    }


def placement_turn_player(placed_pairs: int) -> int:
    """Strict alternation: player 1 on turns 0, 2, 4, ... player 2 on turns 1, 3, 5, ..."""
    return (placed_pairs % 2) + 1


def other_player(player: int) -> int:
    return 2 if player == 1 else 1


def generate_auto_placements(
    pool_1: PlayerPool,
    pool_2: PlayerPool,
    starting_card_id: int = 0,
    rng: Optional[random.Random] = None,
) -> list[PlacementAction]:
    """
    Simulate all 16 placement turns in one go.
    -----

    Each player's pairs are consumed in pool order (unit i with terrain i). The spot is drawn uniformly
    from the frontier at that turn. Pools are not modified: the actions still have to be applied to a Game.

    NOTE the frontier is sorted before drawing so that a seeded rng always produces the same board.
    """
    rng = rng or random.Random()
    pairs = {
        1: list(zip(pool_1.units, pool_1.terrains)),
        2: list(zip(pool_2.units, pool_2.terrains)),
    }
    occupied: set[Coordinate] = set()
    actions: list[PlacementAction] = []
    card_id = starting_card_id

    for turn in range(TOTAL_CARD_PAIRS):
        player = placement_turn_player(turn)
        pair_index = turn // 2
        if pair_index >= len(pairs[player]):
            raise AutoPlacementError(
                f"Player {player} ran out of pairs at placement turn {turn}."
            )
        unit, terrain = pairs[player][pair_index]

        frontier = sorted(compute_legal_spots(occupied))
        if not frontier:
            raise AutoPlacementError(f"No legal placement spot at turn {turn}.")
        position = rng.choice(frontier)

        actions.append(PlacementAction(player, unit, terrain, position, card_id))
        occupied.add(position)
        card_id += 1

    logger.debug("Generated %d auto placement actions", len(actions))
    return actions
