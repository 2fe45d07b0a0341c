"""Orchestration of communication from the rendering layer to the peer sessions and persistence layer (and the reverse direction)."""

import logging
import random
from typing import Callable, Optional
from uuid import UUID

from fogline.api.models import (
    AutoPlaceRequest,
    CardRequest,
    ConnectRequest,
    CreateSessionRequest,
    DeleteSessionRequest,
    DisconnectRequest,
    DisplayNameRequest,
    GetSessionRequest,
    InboundMessageRequest,
    PlaceRequest,
    RestartRequest,
    SessionResponse,
)
from fogline.core.exceptions import RepositoryError
from fogline.core.models import SessionModel
from fogline.core.shared_types import Role
from fogline.db.repository import SessionRepository
from fogline.sync.peer import PeerSession
from fogline.sync.transport import Transport

logger = logging.getLogger(__name__)

SessionOperation = Callable[[PeerSession], object]


class FoglineService:
    """
    Orchestration of layers for one peer.

    Live sessions (they hold the channel) are kept in memory. After every operation the current
    snapshot is written to the repository, so a polling frontend can read it.
    """

    def __init__(self, repository: SessionRepository) -> None:
        self.repo = repository
        self.sessions: dict[UUID, PeerSession] = {}

    # -- Session lifecycle --
    def create_session(
        self,
        request: CreateSessionRequest,
        transport: Transport,
        rng: Optional[random.Random] = None,
    ) -> SessionResponse:
        """A new (not yet connected) session for one game."""
        session = PeerSession(request.role, transport, request.display_name, rng=rng)
        stored_session, session_id = self.repo.create_session(session.snapshot())
        self.sessions[session_id] = session
        logger.info("Created %s session %s", request.role, session_id)
        return self._create_session_response(session_id, stored_session)

    def connect(self, request: ConnectRequest) -> SessionResponse:
        """The channel to the opponent is open."""
        return self._perform(request.session_id, lambda session: session.on_connected())

    def disconnect(self, request: DisconnectRequest) -> SessionResponse:
        """The channel closed or failed. The session ends."""
        return self._perform(request.session_id, lambda session: session.on_disconnected())

    def receive_message(self, request: InboundMessageRequest) -> SessionResponse:
        """Message from the opponent."""
        return self._perform(
            request.session_id, lambda session: session.receive(request.message)
        )

    def get_session_state(self, request: GetSessionRequest) -> SessionResponse:
        """
        Retrieve current session state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        session_model = self.repo.get_session(request.session_id)
        if session_model is None:
            raise RepositoryError(f"Session with {request.session_id=} not found.")
        return self._create_session_response(request.session_id, session_model)

    def delete_session(self, request: DeleteSessionRequest) -> None:
        """Forget a session (closing it first if it is still connected)."""
        session = self.sessions.pop(request.session_id, None)
        if session is not None and session.connected:
            session.on_disconnected()
        self.repo.delete_session(request.session_id)

    # -- Player actions --
    def place(self, request: PlaceRequest) -> SessionResponse:
        return self._perform(
            request.session_id,
            lambda session: session.place(
                request.unit_id, request.terrain_index, request.x, request.y
            ),
        )

    def auto_place(self, request: AutoPlaceRequest) -> SessionResponse:
        return self._perform(request.session_id, lambda session: session.auto_place())

    def click(self, request: CardRequest) -> SessionResponse:
        """Select / deselect / target, depending on what is selected."""
        return self._perform(request.session_id, lambda session: session.click(request.card_id))

    def select_unit(self, request: CardRequest) -> SessionResponse:
        return self._perform(
            request.session_id, lambda session: session.select_unit(request.card_id)
        )

    def resolve_target_action(self, request: CardRequest) -> SessionResponse:
        return self._perform(
            request.session_id,
            lambda session: session.resolve_target_action(request.card_id),
        )

    def restart(self, request: RestartRequest) -> SessionResponse:
        return self._perform(request.session_id, lambda session: session.restart())

    def set_display_name(self, request: DisplayNameRequest) -> SessionResponse:
        return self._perform(
            request.session_id,
            lambda session: session.set_display_name(request.display_name),
        )

    # -- Internal helpers --
    def _perform(self, session_id: UUID, operation: SessionOperation) -> SessionResponse:
        """
        Run the operation on the live session and store the resulting state.

        NOTE the state is stored even when the operation raises: a session that went out of sync or lost
        its connection must show up like that when polled.
        """
        session = self._fetch_session(session_id)
        try:
            operation(session)
        finally:
            stored = self.repo.update_session(session_id, session.snapshot())
        if stored is None:
            raise RepositoryError(f"Session with {session_id=} not found.")
        return self._create_session_response(session_id, stored)

    def _fetch_session(self, session_id: UUID) -> PeerSession:
        """Attempt to find the live session and raise error if it fails."""
        session = self.sessions.get(session_id)
        if session is None:
            raise RepositoryError(f"No live session with {session_id=}.")
        return session

    def _create_session_response(
        self, session_id: UUID, model: SessionModel
    ) -> SessionResponse:
        """Convert info in SessionModel to a SessionResponse (for session with given ID.)"""
        return SessionResponse(
            session_id=session_id,
            role=Role(model.role),
            player=model.player,
            display_name=model.display_name,
            opponent_name=model.opponent_name,
            connected=model.connected,
            error=model.error,
            state=model.state,
        )
