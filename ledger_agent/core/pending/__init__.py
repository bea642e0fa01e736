"""Two-phase (propose, then confirm/cancel) operations held per session."""

from .store import PendingOperation, PendingOperationStore
from .session import SessionRegistry, SessionState

__all__ = [
    "PendingOperation",
    "PendingOperationStore",
    "SessionRegistry",
    "SessionState",
]
