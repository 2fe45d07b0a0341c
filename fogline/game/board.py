"""The Game board keeps track of the placed cards and implements every mutation of the tiles"""

from dataclasses import dataclass, field
from typing import Optional

from fogline.core.exceptions import UnknownCardError
from fogline.core.shared_types import EdgeType
from fogline.game.terrain import TerrainCard
from fogline.game.tile import Coordinate, entry_side
from fogline.game.units import UnitInstance


@dataclass
class PlacedCard:
    """
    A unit + terrain pair on the grid.

    The terrain never moves. The unit (and with it the owner) leaves when it moves away or gets defeated.
    """

    id: int
    owner: Optional[int]
    unit: Optional[UnitInstance]
    terrain: TerrainCard
    position: Coordinate
    revealed: bool = False

    @property
    def is_empty(self) -> bool:
        return self.unit is None

    def reveal(self) -> bool:
        """One-way: a revealed card never gets hidden again. Returns True if this call revealed it."""
        if self.revealed:
            return False
        self.revealed = True
        return True

    def clear_unit(self) -> None:
        """The unit left (moved or defeated). The tile stays revealed: everyone saw it is now empty."""
        self.unit = None
        self.owner = None


@dataclass(frozen=True)
class DefeatedUnit:
    owner: int
    unit: UnitInstance
    terrain: TerrainCard


@dataclass
class Board:
    cards: dict[int, PlacedCard] = field(default_factory=dict)
    positions: dict[Coordinate, int] = field(default_factory=dict)

    def card(self, card_id: int) -> PlacedCard:
        try:
            return self.cards[card_id]
        except KeyError:
            raise UnknownCardError(f"No card with id {card_id} on the board.") from None

    def card_at(self, position: Coordinate) -> Optional[PlacedCard]:
        card_id = self.positions.get(position)
        return self.cards[card_id] if card_id is not None else None

    def occupied(self) -> set[Coordinate]:
        return set(self.positions)

    def place_card(self, card: PlacedCard) -> None:
        """Callers check legality of the spot. The board only guards its own bookkeeping."""
        if card.id in self.cards:
            raise ValueError(f"Card id {card.id} already in use.")
        if card.position in self.positions:
            raise ValueError(f"Position {card.position} already occupied.")
        self.cards[card.id] = card
        self.positions[card.position] = card.id

    def entry_edge(self, from_card: PlacedCard, to_card: PlacedCard) -> Optional[EdgeType]:
        """Terrain edge of `to_card` facing `from_card`. None if the two are not orthogonally adjacent."""
        side = entry_side(from_card.position, to_card.position)
        if side is None:
            return None
        return to_card.terrain.edge(side)

    def transfer_unit(self, from_card: PlacedCard, to_card: PlacedCard) -> None:
        """Move the unit (and its owner) over. Whatever stood on `to_card` is overwritten."""
        to_card.unit = from_card.unit
        to_card.owner = from_card.owner
        to_card.reveal()
        from_card.clear_unit()

    def units_of(self, owner: int, exclude_card_id: Optional[int] = None) -> list[UnitInstance]:
        return [
            card.unit
            for card in self.cards.values()
            if card.owner == owner
            and card.unit is not None
            and card.id != exclude_card_id
        ]

    def player_cards(self, owner: int) -> list[PlacedCard]:
        return [card for card in self.cards.values() if card.owner == owner]
