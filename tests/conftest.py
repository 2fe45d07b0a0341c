"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

import random
from typing import Callable, Generator, Optional

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from fogline.core.shared_types import EdgeType, GamePhase, Role, UnitKind
from fogline.db.schema import Base
from fogline.game.board import PlacedCard
from fogline.game.deck import generate_player_pool, initial_pairings
from fogline.game.game import Game
from fogline.game.terrain import TerrainCard
from fogline.game.tile import Coordinate
from fogline.game.units import UnitInstance
from fogline.sync.peer import PeerSession
from fogline.sync.transport import LoopbackTransport, pump

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

# (owner, kind, instance, terrain, (x, y))
CardSpec = tuple[int, UnitKind, int, TerrainCard, tuple[int, int]]
# (unit_id, terrain_index, x, y) in placement turn order
PlacementPlan = list[tuple[str, int, int, int]]

UNIT_IDS = [
    "mobile_command-1",
    "tank-1",
    "tank-2",
    "infantry-1",
    "infantry-2",
    "infantry-3",
    "artillery-1",
    "special_ops-1",
]

# Terrain layouts by the edge they show on their LEFT side (the side facing an attacker coming from the left)
LEFT_PLAINS = 2
LEFT_FOREST = 0
LEFT_MOUNTAIN = 1


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


def terrain(
    top: EdgeType = EdgeType.PLAINS,
    right: EdgeType = EdgeType.PLAINS,
    bottom: EdgeType = EdgeType.PLAINS,
    left: EdgeType = EdgeType.PLAINS,
    index: int = 0,
) -> TerrainCard:
    """Terrain card with arbitrary edges (the board does not care if it is one of the 8 layouts)"""
    return TerrainCard(index, top, right, bottom, left)


def uniform_terrain(edge: EdgeType) -> TerrainCard:
    return terrain(edge, edge, edge, edge)


@pytest.fixture
def make_game() -> Callable[..., Game]:
    """Call the inner function with a list of cards: returns a Game in the gameplay phase with exactly those cards"""

    def _create_game(cards: list[CardSpec], current_player: int = 1) -> Game:
        game = Game(phase=GamePhase.GAMEPLAY, current_player=current_player, placed_pairs=16)
        for card_id, (owner, kind, instance, card_terrain, (x, y)) in enumerate(cards):
            game.board.place_card(
                PlacedCard(
                    id=card_id,
                    owner=owner,
                    unit=UnitInstance.create(kind, instance),
                    terrain=card_terrain,
                    position=Coordinate(x, y),
                )
            )
        game.next_card_id = len(cards)
        return game

    return _create_game


@pytest.fixture
def placement_game() -> Game:
    """A game right after the setup: placement phase, player 1 to place"""
    pools = {player: generate_player_pool(player, random.Random(player)) for player in (1, 2)}
    pairings = {player: initial_pairings(pool) for player, pool in pools.items()}
    return Game.with_setup(pools, pairings)


def line_plan(
    p1_front: tuple[str, int], p2_front: tuple[str, int]
) -> PlacementPlan:
    """
    All 16 cards on one row (y = 10). Player 1 grows to the left from x = 10, player 2 to the right from x = 11.

    The two front cards are the only contact between the armies: card 0 (player 1) and card 1 (player 2).
    Player 1 attacking card 1 enters through its LEFT edge.
    """

    def _army(front: tuple[str, int]) -> list[tuple[str, int]]:
        unit_id, terrain_index = front
        units = [u for u in UNIT_IDS if u != unit_id]
        terrains = [t for t in range(8) if t != terrain_index]
        return [front] + list(zip(units, terrains))

    p1_army = _army(p1_front)
    p2_army = _army(p2_front)
    plan: PlacementPlan = []
    for i in range(8):
        plan.append((p1_army[i][0], p1_army[i][1], 10 - i, 10))
        plan.append((p2_army[i][0], p2_army[i][1], 11 + i, 10))
    return plan


class ConnectedPeers:
    """Initiator and responder over a loopback channel (handy container for the tests)"""

    def __init__(self, seed: Optional[int] = 7) -> None:
        self.channel_1, self.channel_2 = LoopbackTransport.pair()
        self.initiator = PeerSession(
            Role.INITIATOR, self.channel_1, "Alice", rng=random.Random(seed)
        )
        self.responder = PeerSession(Role.RESPONDER, self.channel_2, "Bob")
        self.channel_1.bind(self.initiator.receive)
        self.channel_2.bind(self.responder.receive)

    def connect(self) -> None:
        self.initiator.on_connected()
        self.responder.on_connected()
        self.pump()

    def pump(self) -> int:
        return pump(self.channel_1, self.channel_2)

    def session(self, player: int) -> PeerSession:
        return self.initiator if player == 1 else self.responder

    def place_all(self, plan: PlacementPlan) -> None:
        for turn, (unit_id, terrain_index, x, y) in enumerate(plan):
            self.session(turn % 2 + 1).place(unit_id, terrain_index, x, y)
            self.pump()


@pytest.fixture
def peers() -> ConnectedPeers:
    """Connected peers, setup exchanged, placement phase"""
    connected = ConnectedPeers()
    connected.connect()
    return connected
