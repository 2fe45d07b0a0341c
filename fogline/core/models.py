"""
Boundary layer data model(s).

These objects are used to communicate with the Service and the rendering layer.
They only hold plain values (no domain objects), so the API layer and db layer never need to import the game package.
"""

from dataclasses import dataclass, field
from typing import Optional

# Type aliases to make the models easier to read
PlayerNumber = int
CardId = int


@dataclass
class UnitModel:
    unit_id: str
    kind: str
    name: str
    instance: int
    attack: int
    defense: int
    traversable: list[str]


@dataclass
class TerrainModel:
    index: int
    top: str
    right: str
    bottom: str
    left: str


@dataclass
class TileModel:
    """A card on the board, as seen by one player. `unit` is None when empty or still hidden from the viewer."""

    id: CardId
    owner: Optional[PlayerNumber]
    x: int
    y: int
    revealed: bool
    terrain: TerrainModel
    unit: Optional[UnitModel] = None


@dataclass
class PairingModel:
    unit: UnitModel
    terrain: TerrainModel


@dataclass
class DefeatedUnitModel:
    owner: PlayerNumber
    unit: UnitModel
    terrain: TerrainModel


@dataclass
class ResultModel:
    winner: PlayerNumber
    reason: str
    message: str


@dataclass
class GameSnapshot:
    """Read-only view of a Game for one player. Never contains the opponent's hidden information."""

    viewer: PlayerNumber
    phase: str
    current_player: PlayerNumber
    placed_pairs: int
    selected_card_id: Optional[CardId] = None
    tiles: list[TileModel] = field(default_factory=list)
    pool_units: list[UnitModel] = field(default_factory=list)
    pool_terrains: list[TerrainModel] = field(default_factory=list)
    pairings: list[PairingModel] = field(default_factory=list)
    legal_spots: list[tuple[int, int]] = field(default_factory=list)
    defeated: list[DefeatedUnitModel] = field(default_factory=list)
    result: Optional[ResultModel] = None


@dataclass
class SessionModel:
    """Transport-safe representation of one peer's session, used between Service, DB and rendering layers."""

    role: str
    player: PlayerNumber
    display_name: str
    opponent_name: Optional[str]
    connected: bool
    error: Optional[str]
    state: GameSnapshot
