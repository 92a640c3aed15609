"""
In-memory session store.

Sessions live only as long as the process; there is no persistence.
All updates go through the state machine in core.session.

Sessions untouched for longer than the TTL are dropped, and once the
store is full the least recently used session is evicted to make room.
"""
import logging
import time
import uuid
from typing import Callable, Dict, List, Optional

from core.exceptions import SessionNotFound
from core.session import SessionEvent, SessionState, UploadState, transition

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the current state of each session by id."""

    def __init__(
        self,
        max_sessions: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            max_sessions: Most sessions kept at once; unlimited if None
            ttl_seconds: Idle time after which a session expires; never if None
            clock: Time source in seconds
        """
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, SessionState] = {}
        self._touched: Dict[str, float] = {}

    def _remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._touched.pop(session_id, None)

    def purge_expired(self) -> int:
        """
        Drop sessions idle for longer than the TTL.

        Returns:
            Number of sessions removed
        """
        if self.ttl_seconds is None:
            return 0
        cutoff = self._clock() - self.ttl_seconds
        expired = [sid for sid, touched in self._touched.items() if touched <= cutoff]
        for session_id in expired:
            self._remove(session_id)
        if expired:
            logger.info("Expired %d idle sessions", len(expired))
        return len(expired)

    def create(self) -> str:
        """Create a session in the upload stage and return its id."""
        self.purge_expired()
        if self.max_sessions is not None:
            while self._sessions and len(self._sessions) >= self.max_sessions:
                oldest = min(self._touched, key=self._touched.get)
                logger.info("Session store full, evicting %s", oldest)
                self._remove(oldest)

        session_id = str(uuid.uuid4())
        self._sessions[session_id] = UploadState()
        self._touched[session_id] = self._clock()
        logger.debug("Created session %s", session_id)
        return session_id

    def get(self, session_id: str) -> SessionState:
        """
        Get the current state of a session.

        Raises:
            SessionNotFound: If no such session exists or it has expired
        """
        self.purge_expired()
        try:
            state = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        self._touched[session_id] = self._clock()
        return state

    def apply(self, session_id: str, event: SessionEvent) -> SessionState:
        """
        Apply an event to a session and store the resulting state.

        Raises:
            SessionNotFound: If no such session exists
            InvalidTransition: If the event does not apply
        """
        state = self.get(session_id)
        new_state = transition(state, event)
        if new_state is state:
            logger.info(
                "Session %s dropped stale %s", session_id, type(event).__name__
            )
        self._sessions[session_id] = new_state
        return new_state

    def delete(self, session_id: str) -> None:
        """Remove a session."""
        if session_id not in self._sessions:
            raise SessionNotFound(session_id)
        self._remove(session_id)

    def list_ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
