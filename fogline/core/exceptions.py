"""
Custom exceptions, shared by every layer.

GameError is the top-level exception: the service and API layers only need to catch that one.
"""


class GameError(Exception):
    """Base class for all errors raised by this package."""


# --- VALIDATION: rejected local actions. Nothing changed, nothing was sent. ---
class ValidationError(GameError):
    """The attempted action is not allowed. Recoverable: the action is simply rejected."""


class InvalidPlacementError(ValidationError):
    pass


class NotYourTurnError(ValidationError):
    pass


class NotYourUnitError(ValidationError):
    pass


class EmptyTileError(ValidationError):
    pass


class NotAdjacentError(ValidationError):
    pass


class TerrainBlockedError(ValidationError):
    pass


class OwnUnitTargetError(ValidationError):
    pass


class NoSelectionError(ValidationError):
    pass


class UnknownCardError(ValidationError):
    pass


# --- GAME FLOW ---
class GameStateError(GameError):
    """Operation called in a phase (or by a role) that does not allow it."""


class InvalidSetupError(GameError):
    """A unit/terrain pool does not have the fixed composition."""


class AutoPlacementError(GameError):
    """Auto placement ran out of frontier spots. Means the adjacency bookkeeping is broken."""


# --- SYNCHRONIZATION ---
class ProtocolError(GameError):
    """Inbound message cannot be applied. The two peers are out of sync, which ends the session."""


class TransportError(GameError):
    """The channel to the opponent closed or failed."""


# --- SERVICE / API ---
class RepositoryError(GameError):
    pass


class InvalidRequestError(GameError):
    pass
