"""
Storage protocol for chat sessions and application settings.

Implementations can use any backing store as long as they satisfy the
protocol interface.
"""

from typing import List, Optional, Protocol

from typing_extensions import runtime_checkable

from casual_cowriter.models import AppConfig, ChatSession


@runtime_checkable
class SessionStore(Protocol):
    """
    Protocol for persisting chat sessions and the application config.

    Sessions are saved whole (messages included); saving an existing id
    replaces it.
    """

    def save_session(self, session: ChatSession) -> str:
        """
        Insert or replace a session.

        Returns:
            The session ID
        """
        ...

    def get_sessions(self) -> List[ChatSession]:
        """All sessions, most recently updated first."""
        ...

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        ...

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a session.

        Returns:
            True if a session was deleted, False if it did not exist
        """
        ...

    def save_app_config(self, config: AppConfig) -> None:
        ...

    def get_app_config(self) -> Optional[AppConfig]:
        """The saved config, or None if none was saved yet."""
        ...
