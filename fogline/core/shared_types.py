"""
Type definitions used across layers
"""

from enum import StrEnum


class GamePhase(StrEnum):
    CONNECTING = "connecting"
    PLACEMENT = "placement"
    GAMEPLAY = "gameplay"
    GAME_OVER = "game over"
    DISCONNECTED = "disconnected"


# Phases only ever move forward in this order. DISCONNECTED is terminal and reachable from anywhere.
PHASE_ORDER: tuple[GamePhase, ...] = (
    GamePhase.CONNECTING,
    GamePhase.PLACEMENT,
    GamePhase.GAMEPLAY,
    GamePhase.GAME_OVER,
    GamePhase.DISCONNECTED,
)


class Role(StrEnum):
    """Decided when the channel is opened. The initiator generates the setup and places first."""

    INITIATOR = "initiator"
    RESPONDER = "responder"


class UnitKind(StrEnum):
    MOBILE_COMMAND = "mobile_command"
    TANK = "tank"
    INFANTRY = "infantry"
    ARTILLERY = "artillery"
    SPECIAL_OPS = "special_ops"


class EdgeType(StrEnum):
    PLAINS = "plains"
    FOREST = "forest"
    MOUNTAIN = "mountain"


class Side(StrEnum):
    """The four edges of a terrain card"""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


class VictoryReason(StrEnum):
    COMMAND_CAPTURED = "command captured"
    ELIMINATION = "elimination"


# Limit for names chosen locally. Names received from the opponent are never rejected.
MAX_DISPLAY_NAME_LENGTH = 64
