"""
Sequence number management for wallet accounts.

Serializes submissions per account so two envelopes are never built
against the same seqno, and tracks which seqnos are in flight.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, AsyncIterator, Dict, Optional, Set

from ...services.address import normalize_ton_address
from ..errors import SequenceConflictError

if TYPE_CHECKING:
    from ...providers.base import LedgerClient

logger = logging.getLogger(__name__)


@dataclass
class SequenceState:
    """Tracks in-flight seqnos for one account."""
    address: str
    last_read: Optional[int] = None             # Last value read from the ledger
    in_flight: Set[int] = field(default_factory=set)
    last_updated: datetime = field(default_factory=datetime.utcnow)


class AccountSequencer:
    """
    Hands out wallet seqnos for envelope submission.

    The seqno is always read fresh from the ledger; nothing is cached
    between submissions. ``reserve`` holds a per-account lock for the whole
    submit/confirm cycle so concurrent callers queue instead of racing.
    """

    def __init__(self, ledger: "LedgerClient"):
        self._ledger = ledger
        self._states: Dict[str, SequenceState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_key(self, address: str) -> str:
        try:
            return normalize_ton_address(address)
        except ValueError:
            return address

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def _get_state(self, key: str) -> SequenceState:
        if key not in self._states:
            self._states[key] = SequenceState(address=key)
        return self._states[key]

    async def current(self, address: str) -> int:
        """Read the wallet's current seqno from the ledger."""
        seqno = await self._ledger.get_seqno(address)
        state = self._get_state(self._get_key(address))
        state.last_read = seqno
        state.last_updated = datetime.utcnow()
        return seqno

    @asynccontextmanager
    async def reserve(self, address: str) -> AsyncIterator[int]:
        """
        Lock the account and yield its current seqno.

        The seqno is settled on exit whether the block confirmed it or
        abandoned it.
        """
        key = self._get_key(address)
        lock = self._get_lock(key)

        async with lock:
            seqno = await self.current(address)
            logger.debug(f"Reserved seqno {seqno} for {key}")
            try:
                yield seqno
            finally:
                self.settle(address, seqno)

    def mark_submitted(self, address: str, seqno: int) -> None:
        """
        Record that an envelope with ``seqno`` was handed to the network.

        Raises:
            SequenceConflictError: if that seqno is already in flight
        """
        key = self._get_key(address)
        state = self._get_state(key)
        if seqno in state.in_flight:
            raise SequenceConflictError(key, seqno)
        state.in_flight.add(seqno)
        state.last_updated = datetime.utcnow()

    def settle(self, address: str, seqno: int) -> None:
        """Release a seqno once its envelope is confirmed or abandoned."""
        key = self._get_key(address)
        state = self._states.get(key)
        if state is None:
            return
        state.in_flight.discard(seqno)
        state.last_updated = datetime.utcnow()

    def in_flight(self, address: str) -> Set[int]:
        state = self._states.get(self._get_key(address))
        return set(state.in_flight) if state else set()

    def get_state(self, address: str) -> Optional[SequenceState]:
        return self._states.get(self._get_key(address))
