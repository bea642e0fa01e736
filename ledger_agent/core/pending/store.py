"""
Pending operation store.

Holds at most one proposed operation per session until the user confirms or
cancels it. There is no queue and no TTL: a second ``start`` is rejected
until the slot is finished, including while a confirmed operation is still
executing.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from ..errors import NoPendingOperationError, PendingConflictError

logger = logging.getLogger(__name__)


@dataclass
class PendingOperation:
    """A proposed operation awaiting an explicit decision."""
    kind: str                                   # e.g. "swap"
    params: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "params": self.params,
            "created_at": self.created_at.isoformat(),
        }


Executor = Callable[[PendingOperation], Awaitable[Any]]


class PendingOperationStore:
    """
    Single-slot store for one session.

    The lock only guards slot changes and is never held while an operation
    executes, so a conflicting ``start`` fails at once.
    """

    def __init__(self, session_id: str, execute: Optional[Executor] = None):
        self.session_id = session_id
        self._execute = execute
        self._pending: Optional[PendingOperation] = None
        self._executing = False
        self._lock = asyncio.Lock()

    def get(self) -> Optional[PendingOperation]:
        return self._pending

    @property
    def is_occupied(self) -> bool:
        return self._pending is not None

    @property
    def is_executing(self) -> bool:
        return self._executing

    async def start(self, operation: PendingOperation) -> PendingOperation:
        """
        Raises:
            PendingConflictError: the slot is occupied; nothing is changed
        """
        async with self._lock:
            if self._pending is not None:
                state = "executing" if self._executing else "pending"
                raise PendingConflictError(
                    f"A {state} {self._pending.kind} operation already exists for session {self.session_id}",
                    details={"session_id": self.session_id, "pending": self._pending.kind, "state": state},
                )
            self._pending = operation
            logger.info(f"Session {self.session_id}: pending {operation.kind} started")
            return operation

    async def finish(self, decision: bool, execute: Optional[Executor] = None) -> Any:
        """
        Resolve the pending operation.

        On ``True`` the operation is executed and the slot cleared even if
        execution raises (the error propagates). The slot stays occupied
        until execution ends. On ``False`` the slot is cleared without
        executing.

        Raises:
            NoPendingOperationError: the slot is empty or already executing
        """
        async with self._lock:
            operation = self._pending
            if operation is None or self._executing:
                raise NoPendingOperationError(f"No pending operation awaiting a decision for session {self.session_id}")

            if not decision:
                self._pending = None
                logger.info(f"Session {self.session_id}: pending {operation.kind} cancelled")
                return None

            runner = execute or self._execute
            if runner is None:
                raise ValueError(f"No executor configured for session {self.session_id}")
            self._executing = True

        try:
            return await runner(operation)
        finally:
            self._pending = None
            self._executing = False
            logger.info(f"Session {self.session_id}: pending {operation.kind} finished")
