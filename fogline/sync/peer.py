"""
One peer's side of a game session.

The PeerSession wraps a Game and the channel to the opponent:
* local actions are validated and applied by the Game, then the result is sent to the opponent
* inbound messages are decoded and applied to the Game as they are (the sender already did the validation)

The INITIATOR is the single source of randomness: it deals both pools and sends the setup.
The RESPONDER adopts that setup verbatim. Attack outcomes are computed by the attacking peer and sent as a result.
"""

import logging
import random
from typing import Callable, Optional

from fogline.core.config import settings
from fogline.core.exceptions import (
    GameError,
    GameStateError,
    InvalidRequestError,
    ProtocolError,
    TransportError,
)
from fogline.core.models import SessionModel
from fogline.core.shared_types import MAX_DISPLAY_NAME_LENGTH, GamePhase, Role
from fogline.game.board import PlacedCard
from fogline.game.combat import AttackOutcome, MoveOutcome
from fogline.game.deck import PlayerPool, generate_player_pool, initial_pairings
from fogline.game.game import Game, Selection
from fogline.game.placement import PlacementAction, generate_auto_placements, other_player
from fogline.game.tile import Coordinate
from fogline.sync.messages import (
    AttackResultMessage,
    DisplayNameMessage,
    Message,
    MoveMessage,
    PlacementMessage,
    RevealMessage,
    SetupMessage,
    SetupPayload,
    attack_result_message,
    decode_message,
    display_name_message,
    encode_message,
    move_message,
    placement_message,
    reveal_message,
    setup_message,
)
from fogline.sync.transport import Transport

logger = logging.getLogger(__name__)

OUT_OF_SYNC = "game state out of sync"
CONNECTION_LOST = "connection lost"

SnapshotListener = Callable[[SessionModel], None]

ROLE_TO_PLAYER: dict[Role, int] = {Role.INITIATOR: 1, Role.RESPONDER: 2}


class PeerSession:
    """Owns the local Game. Construct one per active game connection."""

    def __init__(
        self,
        role: Role,
        transport: Transport,
        display_name: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.role = role
        self.transport = transport
        self.display_name = checked_display_name(display_name or settings.DEFAULT_DISPLAY_NAME)
        self.opponent_name: Optional[str] = None
        self.rng = rng or random.Random()
        self.game = Game()
        self.connected = False
        self.error: Optional[str] = None
        self._listeners: list[SnapshotListener] = []

    @property
    def player(self) -> int:
        return ROLE_TO_PLAYER[self.role]

    @property
    def opponent(self) -> int:
        return other_player(self.player)

    @property
    def phase(self) -> GamePhase:
        return self.game.phase

    # --- CONNECTION LIFECYCLE (reported by the transport owner) ---
    def on_connected(self) -> None:
        """Channel is open. The initiator deals and sends the setup straight away."""
        if self.phase == GamePhase.DISCONNECTED:
            raise GameStateError("Session ended. Start a new session to play again.")
        self.connected = True
        logger.info("Connected as %s (player %d).", self.role, self.player)
        if self.role == Role.INITIATOR:
            self._start_game()
        self._send(display_name_message(self.display_name))
        self._notify()

    def on_disconnected(self) -> None:
        """Ends the session for good (there is no resync)"""
        if not self.connected and self.phase == GamePhase.DISCONNECTED:
            return
        self.connected = False
        self.error = self.error or CONNECTION_LOST
        self.game.disconnect()
        logger.warning("Disconnected from opponent. Session ended.")
        self._notify()

    def subscribe(self, listener: SnapshotListener) -> None:
        """The rendering layer gets a fresh snapshot after every change"""
        self._listeners.append(listener)

    # --- LOCAL ACTIONS ---
    def restart(self) -> None:
        """Rematch after a finished game. Only the initiator deals."""
        self._assert_connected()
        if self.role != Role.INITIATOR:
            raise GameStateError("Only the initiator can start a new game.")
        if self.phase != GamePhase.GAME_OVER:
            raise GameStateError(f"Cannot restart while the game is in phase {self.phase}.")
        self._start_game()
        self._notify()

    def place(self, unit_id: str, terrain_index: int, x: int, y: int) -> PlacedCard:
        self._assert_connected()
        card = self.game.place(self.player, unit_id, terrain_index, Coordinate(x, y))
        self._send_placement(card)
        self._notify()
        return card

    def auto_place(self) -> list[PlacementAction]:
        """
        Instant setup: place all 16 pairs on random frontier spots and send every placement.

        Only the initiator may do this, and only before anyone placed a card.
        """
        self._assert_connected()
        if self.role != Role.INITIATOR:
            raise GameStateError("Only the initiator can auto place.")
        if self.phase != GamePhase.PLACEMENT or self.game.placed_pairs != 0:
            raise GameStateError("Auto placement is only possible before the first placement.")

        actions = generate_auto_placements(
            self.game.pools[1],
            self.game.pools[2],
            starting_card_id=self.game.next_card_id,
            rng=self.rng,
        )
        for action in actions:
            card = self.game.place(
                action.owner,
                action.unit.unit_id,
                action.terrain.index,
                action.position,
                card_id=action.card_id,
            )
            self._send_placement(card)
        self._notify()
        return actions

    def click(self, card_id: int) -> Selection | MoveOutcome | AttackOutcome:
        """
        A click on a card during gameplay.

        Nothing selected (or the selected card again) --> (de)select. Otherwise the card is the target.
        """
        selected = self.game.selected_card_id
        if selected is None or selected == card_id:
            return self.select_unit(card_id)
        return self.resolve_target_action(card_id)

    def select_unit(self, card_id: int) -> Selection:
        self._assert_connected()
        selection = self.game.select_unit(self.player, card_id)
        if selection.revealed:
            self._send(reveal_message(card_id))
        self._notify()
        return selection

    def deselect(self) -> None:
        self.game.deselect()
        self._notify()

    def resolve_target_action(self, target_card_id: int) -> MoveOutcome | AttackOutcome:
        """
        Move or attack with the selected unit
        ----

        Move: send the move, the opponent replays it.
        Attack: reveal the defender first (if hidden), then send the *result* of the combat.
        """
        self._assert_connected()
        target_was_hidden = not self.game.board.card(target_card_id).revealed
        outcome = self.game.resolve_target_action(self.player, target_card_id)

        if isinstance(outcome, MoveOutcome):
            self._send(
                move_message(
                    outcome.attacker_card_id, outcome.target_card_id, outcome.next_player
                )
            )
        else:
            if target_was_hidden:
                self._send(reveal_message(outcome.defender_card_id))
            self._send(attack_result_message(outcome))
        self._notify()
        return outcome

    def set_display_name(self, name: str) -> None:
        """Cosmetic only"""
        self.display_name = checked_display_name(name)
        if self.connected:
            self._send(display_name_message(self.display_name))
        self._notify()

    # --- INBOUND ---
    def receive(self, raw: str | bytes | dict) -> None:
        """
        Apply one message from the opponent.

        Any message that does not fit the local state means the two boards diverged. That ends the session.
        """
        if self.phase == GamePhase.DISCONNECTED:
            logger.warning("Message received after the session ended. Dropped.")
            return

        try:
            message = decode_message(raw)
            self._dispatch(message)
        except ProtocolError as err:
            self._fail_sync(err)
            raise
        except GameError as err:
            protocol_error = ProtocolError(f"Cannot apply message from opponent: {err}")
            self._fail_sync(protocol_error)
            raise protocol_error from err
        self._notify()

    def snapshot(self) -> SessionModel:
        return SessionModel(
            role=self.role.value,
            player=self.player,
            display_name=self.display_name,
            opponent_name=self.opponent_name,
            connected=self.connected,
            error=self.error,
            state=self.game.snapshot(self.player),
        )

    # -- PRIVATE HELPERS ---
    def _dispatch(self, message: Message) -> None:
        match message:
            case SetupMessage(payload=payload):
                self._apply_setup(payload)
            case PlacementMessage(payload=payload):
                if self.role == Role.INITIATOR and payload.owner == self.player:
                    # only the initiator ever sends placements on behalf of both players
                    raise ProtocolError("Received a placement of this peer's own card.")
                self.game.apply_placement(payload.to_action(), payload.next_player)
            case RevealMessage(payload=payload):
                self.game.apply_reveal(payload.card_id)
            case MoveMessage(payload=payload):
                self._assert_opponent_turn()
                self.game.apply_move(
                    payload.attacker_card_id, payload.target_card_id, payload.next_player
                )
            case AttackResultMessage(payload=payload):
                self._assert_opponent_turn()
                self.game.apply_attack_result(
                    winner_card_id=payload.winner_card_id,
                    loser_card_id=payload.loser_card_id,
                    defeated=payload.defeated_unit.to_defeated(),
                    attacker_moved=payload.attacker_moved,
                    next_player=payload.next_player,
                    game_over=payload.game_over,
                    win_message=payload.win_message,
                )
            case DisplayNameMessage(payload=payload):
                self.opponent_name = payload.name
                logger.info("Opponent is %r.", payload.name)
            case _:
                raise ProtocolError(f"Unhandled message: {message!r}")

    def _start_game(self) -> None:
        """Deal both pools, adopt them locally and send the opponent's half of the setup"""
        if self.phase == GamePhase.GAME_OVER:
            self.game = Game()
        pools = {
            player: generate_player_pool(player, rng=self.rng) for player in (1, 2)
        }
        pairings = {player: initial_pairings(pool) for player, pool in pools.items()}
        self.game.start_placement(pools, pairings)
        self._send(setup_message(pools[self.opponent], pairings))

    def _apply_setup(self, payload: SetupPayload) -> None:
        if self.role == Role.INITIATOR:
            raise ProtocolError("Received setup, but this peer is the one dealing.")
        if self.phase == GamePhase.GAME_OVER:
            logger.info("Rematch: received new setup.")
            self.game = Game()
        elif self.phase != GamePhase.CONNECTING:
            raise ProtocolError(f"Setup received in phase {self.phase}.")

        pairings = payload.pairings()
        # The dealer's own pool is only known through its memo pairings (order does not matter there)
        pools = {
            self.opponent: PlayerPool.from_pairings(pairings[self.opponent]),
            self.player: payload.opponent_pool(),
        }
        self.game.start_placement(pools, pairings)
        logger.info("Received game setup from player %d.", self.opponent)

    def _send_placement(self, card: PlacedCard) -> None:
        assert card.owner is not None and card.unit is not None
        action = PlacementAction(card.owner, card.unit, card.terrain, card.position, card.id)
        self._send(placement_message(action, self.game.current_player))

    def _send(self, message: Message) -> None:
        try:
            self.transport.send(encode_message(message))
        except TransportError:
            logger.error("Failed to send %s message.", message.type)
            self.on_disconnected()
            raise

    def _fail_sync(self, err: ProtocolError) -> None:
        logger.error("Game state out of sync: %s", err)
        self.error = OUT_OF_SYNC
        self.connected = False
        self.game.disconnect()
        self._notify()

    def _assert_connected(self) -> None:
        if not self.connected or self.phase == GamePhase.DISCONNECTED:
            raise GameStateError("Not connected to opponent.")

    def _assert_opponent_turn(self) -> None:
        if self.game.current_player != self.opponent:
            raise ProtocolError(
                f"Opponent acted during player {self.game.current_player}'s turn."
            )

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)


def checked_display_name(name: str) -> str:
    """Names chosen locally are checked before anything is sent"""
    stripped = name.strip()
    if not stripped:
        raise InvalidRequestError("Display name cannot be empty.")
    if len(stripped) > MAX_DISPLAY_NAME_LENGTH:
        raise InvalidRequestError(
            f"Display name can have at most {MAX_DISPLAY_NAME_LENGTH} characters."
        )
    return stripped
