"""
Messages exchanged between the two peers.

Every message is a JSON object {"type": ..., "payload": {...}} (payload keys in camelCase).
The set of messages is closed: `Message` is a discriminated union, and anything that does not validate
against one of its variants is a ProtocolError.
"""

from typing import Annotated, Any, Literal, Self, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from fogline.core.exceptions import ProtocolError
from fogline.core.shared_types import EdgeType, UnitKind
from fogline.game.board import DefeatedUnit
from fogline.game.combat import AttackOutcome
from fogline.game.deck import Pairing, PlayerPool
from fogline.game.placement import PlacementAction
from fogline.game.terrain import TerrainCard
from fogline.game.tile import Coordinate
from fogline.game.units import UnitInstance


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid"
    )


# --- PAYLOAD BUILDING BLOCKS ---
class UnitPayload(WireModel):
    kind: UnitKind
    instance: int = Field(ge=1)
    attack: int
    defense: int
    traversable: list[EdgeType]

    @classmethod
    def from_unit(cls, unit: UnitInstance) -> Self:
        return cls(
            kind=unit.kind,
            instance=unit.instance,
            attack=unit.attack,
            defense=unit.defense,
            traversable=sorted(unit.traversable),
        )

    def to_unit(self) -> UnitInstance:
        return UnitInstance(
            self.kind, self.instance, self.attack, self.defense, frozenset(self.traversable)
        )


class TerrainPayload(WireModel):
    index: int = Field(ge=0)
    top: EdgeType
    right: EdgeType
    bottom: EdgeType
    left: EdgeType

    @classmethod
    def from_terrain(cls, terrain: TerrainCard) -> Self:
        return cls(
            index=terrain.index,
            top=terrain.top,
            right=terrain.right,
            bottom=terrain.bottom,
            left=terrain.left,
        )

    def to_terrain(self) -> TerrainCard:
        return TerrainCard(self.index, self.top, self.right, self.bottom, self.left)


class PairingPayload(WireModel):
    unit: UnitPayload
    terrain: TerrainPayload

    @classmethod
    def from_pairing(cls, pairing: Pairing) -> Self:
        return cls(
            unit=UnitPayload.from_unit(pairing.unit),
            terrain=TerrainPayload.from_terrain(pairing.terrain),
        )

    def to_pairing(self) -> Pairing:
        return Pairing(self.unit.to_unit(), self.terrain.to_terrain())


class DefeatedUnitPayload(WireModel):
    owner: int = Field(ge=1, le=2)
    unit: UnitPayload
    terrain: TerrainPayload

    def to_defeated(self) -> DefeatedUnit:
        return DefeatedUnit(self.owner, self.unit.to_unit(), self.terrain.to_terrain())


# --- PAYLOADS ---
class SetupPayload(WireModel):
    """Sent once by the initiator. `opponent_*` is the receiver's own pool, in dealt order."""

    opponent_units: list[UnitPayload]
    opponent_terrains: list[TerrainPayload]
    player1_pairings: list[PairingPayload]
    player2_pairings: list[PairingPayload]

    def opponent_pool(self) -> PlayerPool:
        return PlayerPool(
            units=[unit.to_unit() for unit in self.opponent_units],
            terrains=[terrain.to_terrain() for terrain in self.opponent_terrains],
        )

    def pairings(self) -> dict[int, list[Pairing]]:
        return {
            1: [pairing.to_pairing() for pairing in self.player1_pairings],
            2: [pairing.to_pairing() for pairing in self.player2_pairings],
        }


class PlacementPayload(WireModel):
    owner: int = Field(ge=1, le=2)
    unit: UnitPayload
    terrain: TerrainPayload
    x: int
    y: int
    next_player: int = Field(ge=1, le=2)
    card_id: int = Field(ge=0)

    def to_action(self) -> PlacementAction:
        return PlacementAction(
            owner=self.owner,
            unit=self.unit.to_unit(),
            terrain=self.terrain.to_terrain(),
            position=Coordinate(self.x, self.y),
            card_id=self.card_id,
        )


class RevealPayload(WireModel):
    card_id: int


class MovePayload(WireModel):
    attacker_card_id: int
    target_card_id: int
    next_player: int = Field(ge=1, le=2)


class AttackResultPayload(WireModel):
    winner_card_id: int
    loser_card_id: int
    defeated_unit: DefeatedUnitPayload
    attacker_moved: bool
    next_player: int = Field(ge=1, le=2)
    game_over: bool
    win_message: str = ""


class DisplayNamePayload(WireModel):
    """Cosmetic: whatever the opponent calls itself is shown as is"""

    name: str


# --- MESSAGES ---
class SetupMessage(WireModel):
    type: Literal["setup"] = "setup"
    payload: SetupPayload


class PlacementMessage(WireModel):
    type: Literal["placement"] = "placement"
    payload: PlacementPayload


class RevealMessage(WireModel):
    type: Literal["reveal"] = "reveal"
    payload: RevealPayload


class MoveMessage(WireModel):
    type: Literal["move"] = "move"
    payload: MovePayload


class AttackResultMessage(WireModel):
    type: Literal["attackResult"] = "attackResult"
    payload: AttackResultPayload


class DisplayNameMessage(WireModel):
    type: Literal["displayName"] = "displayName"
    payload: DisplayNamePayload


Message = Annotated[
    Union[
        SetupMessage,
        PlacementMessage,
        RevealMessage,
        MoveMessage,
        AttackResultMessage,
        DisplayNameMessage,
    ],
    Field(discriminator="type"),
]

MESSAGE_ADAPTER: TypeAdapter[Message] = TypeAdapter(Message)


def encode_message(message: Message) -> str:
    return message.model_dump_json(by_alias=True)


def decode_message(raw: str | bytes | dict[str, Any]) -> Message:
    """Parse an inbound message. Unknown types and malformed payloads raise ProtocolError."""
    try:
        if isinstance(raw, dict):
            return MESSAGE_ADAPTER.validate_python(raw)
        return MESSAGE_ADAPTER.validate_json(raw)
    except PydanticValidationError as err:
        raise ProtocolError(f"Invalid message received: {err}") from err


# --- BUILDERS (domain -> message) ---
def setup_message(
    opponent_pool: PlayerPool, pairings: dict[int, list[Pairing]]
) -> SetupMessage:
    return SetupMessage(
        payload=SetupPayload(
            opponent_units=[UnitPayload.from_unit(unit) for unit in opponent_pool.units],
            opponent_terrains=[
                TerrainPayload.from_terrain(terrain) for terrain in opponent_pool.terrains
            ],
            player1_pairings=[PairingPayload.from_pairing(p) for p in pairings[1]],
            player2_pairings=[PairingPayload.from_pairing(p) for p in pairings[2]],
        )
    )


def placement_message(action: PlacementAction, next_player: int) -> PlacementMessage:
    return PlacementMessage(
        payload=PlacementPayload(
            owner=action.owner,
            unit=UnitPayload.from_unit(action.unit),
            terrain=TerrainPayload.from_terrain(action.terrain),
            x=action.position.x,
            y=action.position.y,
            next_player=next_player,
            card_id=action.card_id,
        )
    )


def reveal_message(card_id: int) -> RevealMessage:
    return RevealMessage(payload=RevealPayload(card_id=card_id))


def move_message(attacker_card_id: int, target_card_id: int, next_player: int) -> MoveMessage:
    return MoveMessage(
        payload=MovePayload(
            attacker_card_id=attacker_card_id,
            target_card_id=target_card_id,
            next_player=next_player,
        )
    )


def attack_result_message(outcome: AttackOutcome) -> AttackResultMessage:
    defeated = outcome.defeated
    return AttackResultMessage(
        payload=AttackResultPayload(
            winner_card_id=outcome.winner_card_id,
            loser_card_id=outcome.loser_card_id,
            defeated_unit=DefeatedUnitPayload(
                owner=defeated.owner,
                unit=UnitPayload.from_unit(defeated.unit),
                terrain=TerrainPayload.from_terrain(defeated.terrain),
            ),
            attacker_moved=outcome.attacker_moved,
            next_player=outcome.next_player,
            game_over=outcome.game_over,
            win_message=outcome.win_message,
        )
    )


def display_name_message(name: str) -> DisplayNameMessage:
    return DisplayNameMessage(payload=DisplayNamePayload(name=name))
