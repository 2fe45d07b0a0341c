"""
Offline play: two peers in one process, connected by a loopback channel, making random legal actions.

Used for instant local matches and to check that both peers end up with the same board.
"""

import argparse
import logging
import random
from typing import Optional

from fogline.core.logging_config import configure_logging
from fogline.db.database import SessionLocal, init_db
from fogline.db.sql_repository import SQLSessionRepository
from fogline.core.shared_types import GamePhase, Role
from fogline.sync.peer import PeerSession
from fogline.sync.transport import LoopbackTransport, pump

logger = logging.getLogger(__name__)

MAX_TURNS = 500


def connect_local_peers(
    seed: Optional[int] = None,
) -> tuple[PeerSession, PeerSession, LoopbackTransport, LoopbackTransport]:
    """Initiator + responder wired through a loopback pair, connected and set up (placement phase)"""
    rng = random.Random(seed)
    initiator_channel, responder_channel = LoopbackTransport.pair()
    initiator = PeerSession(
        Role.INITIATOR, initiator_channel, "Player 1", rng=random.Random(rng.getrandbits(64))
    )
    responder = PeerSession(
        Role.RESPONDER, responder_channel, "Player 2", rng=random.Random(rng.getrandbits(64))
    )
    initiator_channel.bind(initiator.receive)
    responder_channel.bind(responder.receive)

    initiator.on_connected()
    responder.on_connected()
    pump(initiator_channel, responder_channel)
    return initiator, responder, initiator_channel, responder_channel


def play_random_match(
    seed: Optional[int] = None, max_turns: int = MAX_TURNS
) -> tuple[PeerSession, PeerSession]:
    """
    Auto place, then let both sides pick random legal actions until the game ends.

    NOTE a game can stall (nobody able to move): then it simply stops after the last possible action.
    """
    rng = random.Random(seed)
    initiator, responder, *channels = connect_local_peers(rng.getrandbits(64))
    initiator.auto_place()
    pump(*channels)

    for _ in range(max_turns):
        if initiator.phase != GamePhase.GAMEPLAY:
            break
        mover = initiator if initiator.game.current_player == initiator.player else responder
        actions = mover.game.legal_actions(mover.player)
        if not actions:
            logger.info("Player %d has no legal action. Game stalls.", mover.player)
            break
        attacker_id, target_id = rng.choice(actions)
        mover.select_unit(attacker_id)
        mover.resolve_target_action(target_id)
        pump(*channels)

    return initiator, responder


def main() -> None:
    parser = argparse.ArgumentParser(description="Play a random local match between two peers.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-turns", type=int, default=MAX_TURNS)
    parser.add_argument(
        "--save", action="store_true", help="Store both final snapshots in the configured database."
    )
    args = parser.parse_args()

    configure_logging()
    initiator, responder = play_random_match(args.seed, args.max_turns)
    if args.save:
        init_db()
        with SessionLocal() as db:
            repo = SQLSessionRepository(db)
            for session in (initiator, responder):
                _, session_id = repo.create_session(session.snapshot())
                logger.info("Stored final state of player %d as session %s", session.player, session_id)
    result = initiator.game.result
    if result:
        logger.info(result.message)
    else:
        logger.info("No winner. Final phase: %s", initiator.phase)


if __name__ == "__main__":
    main()
