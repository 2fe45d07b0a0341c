"""
Movement and combat rules.

Everything in here is pure: the resolver looks at the board and describes what *should* happen.
The Game applies that description (the same way it applies a description received from the opponent).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fogline.core.exceptions import (
    NotAdjacentError,
    OwnUnitTargetError,
    TerrainBlockedError,
)
from fogline.core.shared_types import EdgeType, VictoryReason
from fogline.game.board import Board, DefeatedUnit, PlacedCard
from fogline.game.placement import other_player
from fogline.game.terrain import defense_bonus
from fogline.game.units import can_traverse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameResult:
    winner: int
    reason: VictoryReason
    message: str


@dataclass(frozen=True)
class MoveOutcome:
    attacker_card_id: int
    target_card_id: int
    entry_edge: EdgeType
    next_player: int


@dataclass(frozen=True)
class AttackOutcome:
    attacker_card_id: int
    defender_card_id: int
    winner_card_id: int
    loser_card_id: int
    defeated: DefeatedUnit
    attacker_moved: bool
    attack_value: int
    defense_value: int
    next_player: int
    result: Optional[GameResult] = None

    @property
    def game_over(self) -> bool:
        return self.result is not None

    @property
    def win_message(self) -> str:
        return self.result.message if self.result else ""


def victory_message(winner: int, reason: VictoryReason) -> str:
    if reason == VictoryReason.COMMAND_CAPTURED:
        return f"Player {winner} wins by capturing the Mobile Command!"
    return f"Player {winner} wins by eliminating all other movable units!"


def resolve_target_action(
    board: Board, attacker: PlacedCard, target: PlacedCard
) -> MoveOutcome | AttackOutcome:
    """
    What happens when the selected unit on `attacker` goes for `target`
    ----

    1. target must be exactly one orthogonal step away
    2. the attacking unit must be able to cross the target's edge facing it
    3. empty target --> Move
    4. own unit on target --> rejected
    5. enemy unit --> Attack (defender wins ties)

    NOTE the board is not touched. Revealing the defender is also left to the caller.
    """
    # for the type checker: the caller makes sure a unit was selected
    assert attacker.unit is not None and attacker.owner is not None

    entry_edge = board.entry_edge(attacker, target)
    if entry_edge is None:
        raise NotAdjacentError("Target is not adjacent.")

    if not can_traverse(attacker.unit, entry_edge):
        raise TerrainBlockedError(
            f"{attacker.unit.name} cannot enter via {entry_edge.value}."
        )

    next_player = other_player(attacker.owner)
    if target.is_empty:
        return MoveOutcome(attacker.id, target.id, entry_edge, next_player)

    if target.owner == attacker.owner:
        raise OwnUnitTargetError("Cannot move/attack your own unit.")

    return _resolve_attack(board, attacker, target, entry_edge)


def _resolve_attack(
    board: Board, attacker: PlacedCard, defender: PlacedCard, entry_edge: EdgeType
) -> AttackOutcome:
    assert attacker.unit is not None and defender.unit is not None
    assert attacker.owner is not None and defender.owner is not None

    attack_value = attacker.unit.attack
    defense_value = defender.unit.defense + defense_bonus(entry_edge)
    # Defender wins ties
    attacker_wins = attack_value > defense_value
    winner, loser = (attacker, defender) if attacker_wins else (defender, attacker)
    assert winner.owner is not None and loser.owner is not None and loser.unit is not None

    logger.info(
        "Combat: %s (A:%d) vs %s (D:%d + %d = %d) -> %s wins",
        attacker.unit.name,
        attack_value,
        defender.unit.name,
        defender.unit.defense,
        defense_bonus(entry_edge),
        defense_value,
        "attacker" if attacker_wins else "defender",
    )

    defeated = DefeatedUnit(owner=loser.owner, unit=loser.unit, terrain=loser.terrain)
    result = check_victory(board, loser, winner.owner)
    return AttackOutcome(
        attacker_card_id=attacker.id,
        defender_card_id=defender.id,
        winner_card_id=winner.id,
        loser_card_id=loser.id,
        defeated=defeated,
        attacker_moved=attacker_wins,
        attack_value=attack_value,
        defense_value=defense_value,
        # If the game ends, the turn does not switch
        next_player=attacker.owner if result else other_player(attacker.owner),
        result=result,
    )


def check_victory(board: Board, loser: PlacedCard, winner_owner: int) -> Optional[GameResult]:
    """
    Win conditions, evaluated as if the capture already happened (the losing unit no longer counts)
    ----

    (a) the Mobile Command got captured --> immediate win for the capturer
    (b) the loser has only the Mobile Command left --> win by elimination

    Only one of the two can apply: if (a) does not, the loser's command is still on the board.
    """
    assert loser.unit is not None and loser.owner is not None

    if loser.unit.is_command:
        return GameResult(
            winner_owner,
            VictoryReason.COMMAND_CAPTURED,
            victory_message(winner_owner, VictoryReason.COMMAND_CAPTURED),
        )

    remaining = board.units_of(loser.owner, exclude_card_id=loser.id)
    has_command = any(unit.is_command for unit in remaining)
    has_other_units = any(not unit.is_command for unit in remaining)
    if has_command and not has_other_units:
        return GameResult(
            winner_owner,
            VictoryReason.ELIMINATION,
            victory_message(winner_owner, VictoryReason.ELIMINATION),
        )
    return None
