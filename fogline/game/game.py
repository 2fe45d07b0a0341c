"""
The Game class is the entrypoint into the domain layer for the synchronization layer.
It owns the phase, the turn and the board, and gates which operations can be called when.

Every mutation of the board goes through the private `_apply_*` helpers. Local actions and actions received
from the opponent both end up there, so the two peers run exactly the same update code.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from fogline.core.exceptions import (
    EmptyTileError,
    GameStateError,
    InvalidPlacementError,
    NoSelectionError,
    NotYourTurnError,
    NotYourUnitError,
    ValidationError,
)
from fogline.core.models import (
    DefeatedUnitModel,
    GameSnapshot,
    PairingModel,
    ResultModel,
    TerrainModel,
    TileModel,
    UnitModel,
)
from fogline.core.shared_types import PHASE_ORDER, GamePhase, VictoryReason
from fogline.game.board import Board, DefeatedUnit, PlacedCard
from fogline.game.combat import (
    AttackOutcome,
    GameResult,
    MoveOutcome,
    resolve_target_action,
)
from fogline.game.deck import Pairing, PlayerPool, validate_pool
from fogline.game.placement import (
    TOTAL_CARD_PAIRS,
    PlacementAction,
    compute_legal_spots,
    other_player,
    placement_turn_player,
)
from fogline.game.terrain import TerrainCard
from fogline.game.tile import Coordinate
from fogline.game.units import UnitInstance

logger = logging.getLogger(__name__)

PLAYERS = (1, 2)


@dataclass(frozen=True)
class Selection:
    """What happened when a player clicked one of their own units"""

    card_id: int
    selected: bool
    revealed: bool


@dataclass
class Game:
    board: Board = field(default_factory=Board)
    phase: GamePhase = GamePhase.CONNECTING
    current_player: int = 1
    placed_pairs: int = 0
    pools: dict[int, PlayerPool] = field(default_factory=dict)
    pairings: dict[int, list[Pairing]] = field(default_factory=dict)
    defeated: list[DefeatedUnit] = field(default_factory=list)
    selected_card_id: Optional[int] = None
    result: Optional[GameResult] = None
    next_card_id: int = 0

    @classmethod
    def with_setup(
        cls, pools: dict[int, PlayerPool], pairings: dict[int, list[Pairing]]
    ) -> Self:
        """Convenience: a new game that skips the connecting phase"""
        game = cls()
        game.start_placement(pools, pairings)
        return game

    # --- PHASE: CONNECTING -> PLACEMENT ---
    def start_placement(
        self, pools: dict[int, PlayerPool], pairings: dict[int, list[Pairing]]
    ) -> None:
        """
        Adopt the setup (generated locally by the initiator, or received by the responder).

        Pools are copied: the game consumes them during placement.
        """
        self._assert_phase(GamePhase.CONNECTING)
        for player in PLAYERS:
            validate_pool(pools[player])

        self.pools = {
            player: PlayerPool(list(pools[player].units), list(pools[player].terrains))
            for player in PLAYERS
        }
        self.pairings = {player: list(pairings.get(player, [])) for player in PLAYERS}
        self.current_player = placement_turn_player(0)
        self.placed_pairs = 0
        self._change_phase(GamePhase.PLACEMENT)
        logger.info("Setup complete. Player %d's turn to place.", self.current_player)

    # --- PHASE: PLACEMENT ---
    def legal_spots(self) -> set[Coordinate]:
        return compute_legal_spots(self.board.occupied())

    def place(
        self,
        player: int,
        unit_id: str,
        terrain_index: int,
        position: Coordinate,
        card_id: Optional[int] = None,
    ) -> PlacedCard:
        """
        Place one unit + terrain pair.
        -----

        1. must be the placement phase and the player's placement turn
        2. the spot must be on the frontier
        3. unit and terrain must still be in the player's pool
        4. the card id is assigned here, unless the originating peer already assigned one

        After the 16th pair the game moves to GAMEPLAY with player 1 to move.
        """
        self._assert_phase(GamePhase.PLACEMENT)
        self._assert_turn(player)

        if position not in self.legal_spots():
            raise InvalidPlacementError(
                f"({position.x}, {position.y}) is not a legal placement spot."
            )

        if card_id is None:
            card_id = self.next_card_id
        elif card_id in self.board.cards:
            raise InvalidPlacementError(f"Card id {card_id} is already in use.")

        # all checks passed (take() only removes when both unit and terrain are present)
        unit, terrain = self.pools[player].take(unit_id, terrain_index)
        card = PlacedCard(
            id=card_id, owner=player, unit=unit, terrain=terrain, position=position
        )
        self.board.place_card(card)
        self.next_card_id = max(self.next_card_id, card_id + 1)
        self.placed_pairs += 1

        logger.info(
            "Player %d placed %s (instance %d) on terrain #%d at (%d, %d).",
            player,
            unit.name,
            unit.instance,
            terrain.index + 1,
            position.x,
            position.y,
        )

        if self.placed_pairs >= TOTAL_CARD_PAIRS:
            self.current_player = 1
            self._change_phase(GamePhase.GAMEPLAY)
            logger.info("Placement complete! Player 1's turn to move or attack.")
        else:
            self.current_player = other_player(player)
        return card

    def apply_placement(self, action: PlacementAction, next_player: int) -> PlacedCard:
        """A placement made by the other peer (or by auto placement). The card id is used as is."""
        pool = self.pools.get(action.owner)
        if pool is not None:
            if pool.find_unit(action.unit.unit_id) not in (None, action.unit):
                raise InvalidPlacementError(f"Unit {action.unit.unit_id!r} does not match the pool.")
            if pool.find_terrain(action.terrain.index) not in (None, action.terrain):
                raise InvalidPlacementError(f"Terrain #{action.terrain.index + 1} does not match the pool.")

        expected_next = (
            1 if self.placed_pairs + 1 >= TOTAL_CARD_PAIRS else other_player(action.owner)
        )
        if next_player != expected_next:
            raise GameStateError(
                f"Next player {next_player} does not match expected player {expected_next}."
            )
        return self.place(
            action.owner,
            action.unit.unit_id,
            action.terrain.index,
            action.position,
            card_id=action.card_id,
        )

    # --- PHASE: GAMEPLAY ---
    def select_unit(self, player: int, card_id: int) -> Selection:
        """
        Select one of your units (first step of a move or attack).
        ----

        Selecting a hidden unit reveals it (for good). Selecting the selected unit again deselects it.
        """
        self._assert_phase(GamePhase.GAMEPLAY)
        self._assert_turn(player)

        card = self.board.card(card_id)
        if self.selected_card_id == card_id:
            self.deselect()
            return Selection(card_id, selected=False, revealed=False)

        if card.is_empty:
            raise EmptyTileError("Cannot select an empty space.")
        if card.owner != player:
            raise NotYourUnitError("Cannot select opponent's card.")

        revealed = card.reveal()
        self.selected_card_id = card_id
        return Selection(card_id, selected=True, revealed=revealed)

    def deselect(self) -> None:
        """Purely local: no turn change, and a revealed unit stays revealed"""
        self.selected_card_id = None

    def apply_reveal(self, card_id: int) -> bool:
        """The opponent revealed one of the cards"""
        self._assert_phase(GamePhase.GAMEPLAY)
        return self.board.card(card_id).reveal()

    def resolve_target_action(
        self, player: int, target_card_id: int
    ) -> MoveOutcome | AttackOutcome:
        """
        Move or attack with the selected unit.
        ----

        The resolver computes the outcome without touching the board. Only when it is accepted:
        * reveal the defender (if attacking)
        * apply the outcome
        """
        self._assert_phase(GamePhase.GAMEPLAY)
        self._assert_turn(player)
        if self.selected_card_id is None:
            raise NoSelectionError("Select one of your units first.")

        attacker = self.board.card(self.selected_card_id)
        target = self.board.card(target_card_id)
        if attacker.owner != player or attacker.is_empty:
            # selection went stale (should not happen: selection is cleared after every action)
            self.deselect()
            raise NoSelectionError("Selected card no longer holds your unit.")

        outcome = resolve_target_action(self.board, attacker, target)

        if isinstance(outcome, MoveOutcome):
            self._apply_move(attacker, target, outcome.next_player)
        else:
            target.reveal()
            self._apply_attack_result(
                winner=self.board.card(outcome.winner_card_id),
                loser=self.board.card(outcome.loser_card_id),
                defeated=outcome.defeated,
                attacker_moved=outcome.attacker_moved,
                next_player=outcome.next_player,
                result=outcome.result,
            )
        return outcome

    def apply_move(self, attacker_card_id: int, target_card_id: int, next_player: int) -> None:
        """
        A move made by the other peer.

        NOTE moves are cheap to verify, so run the same rules again: anything else than a legal move means desync.
        """
        self._assert_phase(GamePhase.GAMEPLAY)
        attacker = self.board.card(attacker_card_id)
        target = self.board.card(target_card_id)
        if attacker.is_empty or attacker.owner != self.current_player:
            raise GameStateError(
                f"Card {attacker_card_id} does not hold a unit of player {self.current_player}."
            )

        outcome = resolve_target_action(self.board, attacker, target)
        if not isinstance(outcome, MoveOutcome):
            raise GameStateError(f"Card {target_card_id} is not empty: cannot move there.")
        if outcome.next_player != next_player:
            raise GameStateError(
                f"Next player {next_player} does not match expected player {outcome.next_player}."
            )
        self._apply_move(attacker, target, next_player)

    def apply_attack_result(
        self,
        winner_card_id: int,
        loser_card_id: int,
        defeated: DefeatedUnit,
        attacker_moved: bool,
        next_player: int,
        game_over: bool,
        win_message: str,
    ) -> None:
        """
        The outcome of an attack resolved by the other peer.
        ----

        The combat math is NOT repeated: the received result is applied as is.
        We only check that it describes the board we have.
        """
        self._assert_phase(GamePhase.GAMEPLAY)
        winner = self.board.card(winner_card_id)
        loser = self.board.card(loser_card_id)
        if winner.is_empty or loser.is_empty:
            raise GameStateError("Attack result refers to an empty card.")
        if winner.owner == loser.owner:
            raise GameStateError("Attack result between units of the same player.")
        if winner.position.direction_to(loser.position) is None:
            raise GameStateError("Attack result between cards that are not adjacent.")
        if (
            loser.unit != defeated.unit
            or loser.owner != defeated.owner
            or loser.terrain != defeated.terrain
        ):
            raise GameStateError(
                f"Defeated unit {defeated.unit.unit_id!r} is not the unit on card {loser_card_id}."
            )

        attacker = winner if attacker_moved else loser
        if attacker.owner != self.current_player:
            raise GameStateError(f"Player {attacker.owner} attacked out of turn.")

        expected_next = self.current_player if game_over else other_player(self.current_player)
        if next_player != expected_next:
            raise GameStateError(
                f"Next player {next_player} does not match expected player {expected_next}."
            )

        result = None
        if game_over:
            assert winner.owner is not None
            reason = (
                VictoryReason.COMMAND_CAPTURED
                if defeated.unit.is_command
                else VictoryReason.ELIMINATION
            )
            result = GameResult(winner.owner, reason, win_message)

        self._apply_attack_result(
            winner, loser, defeated, attacker_moved, next_player, result
        )

    def legal_actions(self, player: int) -> list[tuple[int, int]]:
        """(attacker card id, target card id) for every move/attack the player could make right now"""
        if self.phase != GamePhase.GAMEPLAY:
            return []
        actions: list[tuple[int, int]] = []
        for card in self.board.player_cards(player):
            if card.is_empty:
                continue
            for neighbor in card.position.neighbors():
                target = self.board.card_at(neighbor)
                if target is None:
                    continue
                try:
                    resolve_target_action(self.board, card, target)
                except ValidationError:
                    continue
                actions.append((card.id, target.id))
        return actions

    # --- ANY PHASE ---
    def disconnect(self) -> None:
        """Terminal: no further operations are accepted"""
        if self.phase == GamePhase.DISCONNECTED:
            return
        self.selected_card_id = None
        self._change_phase(GamePhase.DISCONNECTED)
        logger.info("Game session ended: disconnected.")

    @property
    def winner(self) -> Optional[int]:
        return self.result.winner if self.result else None

    def snapshot(self, viewer: int) -> GameSnapshot:
        """
        What `viewer` is allowed to see.

        Own units are always visible to their owner. Opponent units only once revealed.
        Pools and memo pairings are only shown to their owner.
        """
        tiles = [
            TileModel(
                id=card.id,
                owner=card.owner,
                x=card.position.x,
                y=card.position.y,
                revealed=card.revealed,
                terrain=terrain_to_model(card.terrain),
                unit=(
                    unit_to_model(card.unit)
                    if card.unit is not None
                    and (card.revealed or card.owner == viewer)
                    else None
                ),
            )
            for card in sorted(self.board.cards.values(), key=lambda c: c.id)
        ]
        pool = self.pools.get(viewer, PlayerPool())
        return GameSnapshot(
            viewer=viewer,
            phase=self.phase.value,
            current_player=self.current_player,
            placed_pairs=self.placed_pairs,
            selected_card_id=self.selected_card_id,
            tiles=tiles,
            pool_units=[unit_to_model(unit) for unit in pool.units],
            pool_terrains=[terrain_to_model(terrain) for terrain in pool.terrains],
            pairings=[
                PairingModel(unit_to_model(p.unit), terrain_to_model(p.terrain))
                for p in self.pairings.get(viewer, [])
            ],
            legal_spots=(
                [(spot.x, spot.y) for spot in sorted(self.legal_spots())]
                if self.phase == GamePhase.PLACEMENT
                else []
            ),
            defeated=[
                DefeatedUnitModel(
                    d.owner, unit_to_model(d.unit), terrain_to_model(d.terrain)
                )
                for d in self.defeated
            ],
            result=(
                ResultModel(self.result.winner, self.result.reason.value, self.result.message)
                if self.result
                else None
            ),
        )

    # -- PRIVATE HELPERS ---
    def _assert_phase(self, phase: GamePhase) -> None:
        if self.phase != phase:
            raise GameStateError(
                f"Not allowed in this phase. phase: {self.phase}, required: {phase}"
            )

    def _assert_turn(self, player: int) -> None:
        if player != self.current_player:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for player {self.current_player}."
            )

    def _change_phase(self, new_phase: GamePhase) -> None:
        """Phases only move forward"""
        if PHASE_ORDER.index(new_phase) <= PHASE_ORDER.index(self.phase):
            raise GameStateError(f"Cannot go from phase {self.phase} to {new_phase}.")
        self.phase = new_phase

    def _apply_move(self, attacker: PlacedCard, target: PlacedCard, next_player: int) -> None:
        assert attacker.unit is not None
        logger.info(
            "Player %s moved %s to card %d.", attacker.owner, attacker.unit.name, target.id
        )
        self.board.transfer_unit(attacker, target)
        self.selected_card_id = None
        self.current_player = next_player

    def _apply_attack_result(
        self,
        winner: PlacedCard,
        loser: PlacedCard,
        defeated: DefeatedUnit,
        attacker_moved: bool,
        next_player: int,
        result: Optional[GameResult],
    ) -> None:
        """
        Board update after combat
        ---

        * attacker won: it moves into the defender's tile, its own tile empties
        * defender won: the attacker's tile empties, the defender stays (revealed)
        """
        self.defeated.append(defeated)
        if attacker_moved:
            self.board.transfer_unit(winner, loser)
        else:
            loser.clear_unit()
            winner.reveal()
        self.selected_card_id = None

        logger.info(
            "Combat resolved: player %d's %s was defeated.",
            defeated.owner,
            defeated.unit.name,
        )

        if result is not None:
            self.result = result
            self._change_phase(GamePhase.GAME_OVER)
            logger.info(result.message)
        else:
            self.current_player = next_player


# --- CONVERSION TO BOUNDARY MODELS ---
def unit_to_model(unit: UnitInstance) -> UnitModel:
    return UnitModel(
        unit_id=unit.unit_id,
        kind=unit.kind.value,
        name=unit.name,
        instance=unit.instance,
        attack=unit.attack,
        defense=unit.defense,
        traversable=sorted(edge.value for edge in unit.traversable),
    )


def terrain_to_model(terrain: TerrainCard) -> TerrainModel:
    return TerrainModel(
        index=terrain.index,
        top=terrain.top.value,
        right=terrain.right.value,
        bottom=terrain.bottom.value,
        left=terrain.left.value,
    )
