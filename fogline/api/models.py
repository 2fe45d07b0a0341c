"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from fogline.core.exceptions import InvalidRequestError
from fogline.core.models import GameSnapshot
from fogline.core.shared_types import Role
from fogline.sync.peer import checked_display_name


def _validate_display_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    return checked_display_name(value)


# --- REQUEST MODELS ---
class CreateSessionRequest(BaseModel):
    role: Role
    display_name: Optional[str] = None

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, value: Optional[str]) -> Optional[str]:
        return _validate_display_name(value)


class SessionRequest(BaseModel):
    """Any request that only needs to know which session it is about"""

    session_id: UUID


class GetSessionRequest(SessionRequest):
    pass


class DeleteSessionRequest(SessionRequest):
    pass


class ConnectRequest(SessionRequest):
    pass


class DisconnectRequest(SessionRequest):
    pass


class AutoPlaceRequest(SessionRequest):
    pass


class RestartRequest(SessionRequest):
    pass


class InboundMessageRequest(SessionRequest):
    """Raw message received from the opponent's channel"""

    message: str


class PlaceRequest(SessionRequest):
    unit_id: str
    terrain_index: int
    x: int
    y: int

    @field_validator("unit_id")
    @classmethod
    def validate_unit_id(cls, value: str) -> str:
        # 'tank-2', 'special_ops-1', ...
        kind, _, instance = value.rpartition("-")
        if not kind or not instance.isdigit():
            raise InvalidRequestError(f"Cannot interpret {value!r} as a unit id.")
        return value

    @field_validator("terrain_index")
    @classmethod
    def validate_terrain_index(cls, value: int) -> int:
        if not 0 <= value < 8:
            raise InvalidRequestError(f"Terrain index {value} out of range 0-7.")
        return value


class CardRequest(SessionRequest):
    """Click on a card (select / deselect / target) or target a card with the selected unit"""

    card_id: int

    @field_validator("card_id")
    @classmethod
    def validate_card_id(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"Card ids are never negative: {value}.")
        return value


class DisplayNameRequest(SessionRequest):
    display_name: str

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, value: str) -> str:
        name = _validate_display_name(value)
        assert name is not None
        return name


# --- RESPONSE MODELS ---
class SessionResponse(BaseModel):
    session_id: UUID
    role: Role
    player: int
    display_name: str
    opponent_name: Optional[str]
    connected: bool
    error: Optional[str]
    state: GameSnapshot
