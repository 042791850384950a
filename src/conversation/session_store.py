"""
Session storage for in-progress conversations.

The dialogue engine only talks to the SessionStore interface, so the
in-memory store can be replaced by an external one or a test double.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional
from loguru import logger

from .context import ConversationSession


class SessionStore(ABC):
    """Interface for keeping ConversationSession objects by session id."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[ConversationSession]:
        """Return the session, or None if it does not exist."""

    @abstractmethod
    def create(self, session_id: str) -> ConversationSession:
        """Create a fresh session at the greeting step, replacing any existing one."""

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Delete a session. Returns True if it existed."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    def get_or_create(self, session_id: str) -> ConversationSession:
        session = self.get(session_id)
        if session is None:
            session = self.create(session_id)
        return session

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None


class InMemorySessionStore(SessionStore):
    """
    Process-wide dict of sessions.

    Entries live until the booking is finalized or the session is reset.
    Abandoned conversations are never evicted, so the map grows without
    bound in a long-running process.
    """

    def __init__(self):
        self._sessions: Dict[str, ConversationSession] = {}

    def get(self, session_id: str) -> Optional[ConversationSession]:
        return self._sessions.get(session_id)

    def create(self, session_id: str) -> ConversationSession:
        session = ConversationSession(session_id=session_id)
        self._sessions[session_id] = session
        logger.debug(f"Session created: {session_id} (active sessions: {len(self._sessions)})")
        return session

    def delete(self, session_id: str) -> bool:
        existed = self._sessions.pop(session_id, None) is not None
        if existed:
            logger.debug(f"Session deleted: {session_id} (active sessions: {len(self._sessions)})")
        return existed

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))
