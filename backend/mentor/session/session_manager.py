"""Registry of live sessions."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from .session_models import Sender, Session

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks sessions from connect to disconnect."""

    def __init__(self):
        self._sessions: Dict[UUID, Session] = {}
        logger.info("SessionManager initialized")

    def create_session(self, sender: Optional[Sender] = None, client: Optional[str] = None) -> Session:
        session = Session(sender=sender, client=client)
        self._sessions[session.id] = session
        logger.info(f"Client connected: {session.id} ({client})", extra={"session_id": str(session.id)})
        return session

    def get_session(self, session_id: UUID) -> Optional[Session]:
        return self._sessions.get(session_id)

    async def end_session(self, session_id: UUID) -> bool:
        """Close and forget a session. Returns False if it was unknown."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        pending = session.pending_count
        await session.close()
        logger.info(
            f"Client disconnected: {session_id} ({pending} requests abandoned)",
            extra={"session_id": str(session_id)},
        )
        return True

    def list_sessions(self) -> List[Session]:
        return list(self._sessions.values())

    def get_session_count(self) -> int:
        return len(self._sessions)
