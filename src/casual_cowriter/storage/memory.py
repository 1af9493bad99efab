"""
In-memory session storage.

Suitable for testing and single-process use. Data is lost on restart.
"""

import logging
from typing import Dict, List, Optional

from casual_cowriter.models import AppConfig, ChatSession

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """In-memory implementation of the SessionStore protocol."""

    def __init__(self):
        self._sessions: Dict[str, ChatSession] = {}
        self._app_config: Optional[AppConfig] = None

        logger.info("InMemorySessionStore initialized")

    def save_session(self, session: ChatSession) -> str:
        # Stored as a copy so later mutation by the caller is not persisted implicitly
        self._sessions[session.id] = session.model_copy(deep=True)
        logger.debug(f"Saved session {session.id} ({len(session.messages)} messages)")
        return session.id

    def get_sessions(self) -> List[ChatSession]:
        sessions = sorted(self._sessions.values(), key=lambda s: s.updated_at, reverse=True)
        return [s.model_copy(deep=True) for s in sessions]

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    def delete_session(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            logger.warning(f"Cannot delete session {session_id}: not found")
            return False

        del self._sessions[session_id]
        logger.info(f"Deleted session {session_id}")
        return True

    def save_app_config(self, config: AppConfig) -> None:
        self._app_config = config.model_copy(deep=True)

    def get_app_config(self) -> Optional[AppConfig]:
        return self._app_config.model_copy(deep=True) if self._app_config else None
