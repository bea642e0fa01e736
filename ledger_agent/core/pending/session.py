"""Per-session state passed explicitly to actions."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .store import Executor, PendingOperationStore

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Mutable state owned by one conversation session."""
    session_id: str
    pending: PendingOperationStore


class SessionRegistry:
    """Hands out one SessionState per session id."""

    def __init__(self, execute: Optional[Executor] = None):
        self._execute = execute
        self._sessions: Dict[str, SessionState] = {}

    def get(self, session_id: str) -> SessionState:
        state = self._sessions.get(session_id)
        if state is None:
            state = SessionState(
                session_id=session_id,
                pending=PendingOperationStore(session_id, execute=self._execute),
            )
            self._sessions[session_id] = state
            logger.debug(f"Created session state {session_id}")
        return state

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def session_ids(self) -> List[str]:
        return list(self._sessions)
