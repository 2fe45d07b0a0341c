"""Implementation of (Session)Repository using SQLAlchemy"""

from dataclasses import asdict
from uuid import UUID, uuid4

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session

from fogline.core.models import GameSnapshot, SessionModel
from fogline.db.schema import DBSession

SNAPSHOT_ADAPTER = TypeAdapter(GameSnapshot)


class SQLSessionRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_session(self, session_id: UUID) -> SessionModel | None:
        """Get session by ID, if record exists."""
        session_db = self._fetch_session(session_id)
        if session_db:
            return self._to_model(session_db)
        return None

    def create_session(self, session: SessionModel) -> tuple[SessionModel, UUID]:
        """Store new session and return the stored data + newly created session ID."""
        new_id = uuid4()
        session_db = DBSession(id=new_id)
        self._copy_into(session_db, session)
        self.db.add(session_db)
        self.db.commit()
        self.db.refresh(session_db)
        return self._to_model(session_db), new_id

    def update_session(self, session_id: UUID, session: SessionModel) -> SessionModel | None:
        """Overwrite the stored state of an existing record."""
        session_db = self._fetch_session(session_id)
        if not session_db:
            return None
        self._copy_into(session_db, session)
        self.db.commit()
        self.db.refresh(session_db)
        return self._to_model(session_db)

    def delete_session(self, session_id: UUID) -> SessionModel | None:
        """Remove a session's record."""
        session_db = self._fetch_session(session_id)
        if not session_db:
            return None
        session_model = self._to_model(session_db)
        self.db.delete(session_db)
        self.db.commit()
        return session_model

    def _fetch_session(self, session_id: UUID) -> DBSession | None:
        query = select(DBSession).where(DBSession.id == session_id)
        return self.db.scalar(query)

    def _copy_into(self, session_db: DBSession, session: SessionModel) -> None:
        session_db.role = session.role
        session_db.player = session.player
        session_db.display_name = session.display_name
        session_db.opponent_name = session.opponent_name
        session_db.connected = session.connected
        session_db.error = session.error
        session_db.phase = session.state.phase
        # JSON column: tuples (legal spots) come back as lists, the adapter turns them into tuples again
        session_db.state = asdict(session.state)

    def _to_model(self, session_db: DBSession) -> SessionModel:
        """Convert SQLAlchemy model to data transfer model."""
        return SessionModel(
            role=session_db.role,
            player=session_db.player,
            display_name=session_db.display_name,
            opponent_name=session_db.opponent_name,
            connected=session_db.connected,
            error=session_db.error,
            state=SNAPSHOT_ADAPTER.validate_python(session_db.state),
        )
