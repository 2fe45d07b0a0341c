"""Protocol repository (implemented with SQLAlchemy in sql_repository.py, with a dict in the service tests)"""

from typing import Protocol
from uuid import UUID

from fogline.core.models import SessionModel


class SessionRepository(Protocol):
    """Persistence layer orchestration. Only the current state of a session is kept (no history)."""

    def get_session(self, session_id: UUID) -> SessionModel | None:
        """Get session by ID, if record exists."""
        ...

    def create_session(self, session: SessionModel) -> tuple[SessionModel, UUID]:
        """Store new session and return the stored data + newly created session ID."""
        ...

    def update_session(self, session_id: UUID, session: SessionModel) -> SessionModel | None:
        """Overwrite the stored state of an existing record."""
        ...

    def delete_session(self, session_id: UUID) -> SessionModel | None:
        """Remove a session's record."""
        ...
