"""
Shared fixtures: an in-memory ledger, a scripted get-method runner and a
wired executor that never sleeps.
"""

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from ledger_agent.core.execution import (
    AccountSequencer,
    ConfirmationWaiter,
    TransactionEnvelope,
    TransactionExecutor,
    TransactionId,
    TransactionPhases,
    TransactionSubmitter,
    WalletAccount,
)
from ledger_agent.core.errors import ProviderError
from ledger_agent.providers.base import GetMethodResult, GetMethodRunner, LedgerClient

WALLET_ADDRESS = "0:" + "aa" * 32


class FakeLedger(LedgerClient):
    """In-memory ledger client.

    ``observations`` are returned, one per call, by ``get_last_transaction``;
    ids queued with ``after_send`` only become visible once an envelope is sent.
    """

    name = "fake"

    def __init__(self, seqno: int = 0, last_tx: Optional[TransactionId] = None):
        self.seqno = seqno
        self.last_tx = last_tx
        self.observations: List[Optional[TransactionId]] = []
        self.phases: Dict[str, TransactionPhases] = {}
        self.sent: List[TransactionEnvelope] = []
        self.send_error: Optional[Exception] = None
        self._after_send: List[Optional[TransactionId]] = []

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    def after_send(self, *tx_ids: Optional[TransactionId]) -> None:
        self._after_send.extend(tx_ids)

    def land(self, tx_hash: str, lt: str, **phase_fields: Any) -> TransactionId:
        """Register phases for a transaction and return its id."""
        tx_id = TransactionId(lt=lt, hash=tx_hash)
        self.phases[tx_hash] = TransactionPhases(hash=tx_hash, **phase_fields)
        return tx_id

    async def get_seqno(self, address: str) -> int:
        return self.seqno

    async def send_envelope(self, envelope: TransactionEnvelope) -> str:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(envelope)
        self.observations.extend(self._after_send)
        self._after_send.clear()
        return f"envelope-{envelope.seqno}"

    async def get_last_transaction(self, address: str) -> Optional[TransactionId]:
        if self.observations:
            self.last_tx = self.observations.pop(0)
        return self.last_tx

    async def get_transaction_phases(self, address: str, tx_id: TransactionId) -> Optional[TransactionPhases]:
        return self.phases.get(tx_id.hash)


class FakeGetMethods(GetMethodRunner):
    """Get-method runner answering from a table of canned stacks."""

    name = "fake-get-methods"

    def __init__(self):
        self.results: Dict[Tuple, Any] = {}
        self.calls: List[Tuple] = []

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    def set(self, address: str, method: str, stack: Any, *args: str) -> None:
        self.results[(address, method, args)] = stack

    async def run_get_method(self, address: str, method: str, *args: str) -> GetMethodResult:
        self.calls.append((address, method, args))
        key = (address, method, args)
        if key not in self.results:
            key = (address, method, ())
        if key not in self.results:
            raise ProviderError(f"No canned result for {method} on {address}", provider=self.name)
        value = self.results[key]
        if isinstance(value, Exception):
            raise value
        return GetMethodResult(exit_code=0, stack=list(value))


@pytest.fixture
def wallet() -> WalletAccount:
    return WalletAccount(address=WALLET_ADDRESS, secret_key=b"\x01" * 64)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger(seqno=7, last_tx=TransactionId(lt="100", hash="prev"))


@pytest.fixture
def get_methods() -> FakeGetMethods:
    return FakeGetMethods()


@pytest.fixture
def signer():
    signer = MagicMock()
    signer.sign = AsyncMock(return_value=b"signed-boc")
    return signer


@pytest.fixture
def sequencer(ledger) -> AccountSequencer:
    return AccountSequencer(ledger)


@pytest.fixture
def submitter(ledger, sequencer, signer, wallet) -> TransactionSubmitter:
    return TransactionSubmitter(
        ledger,
        sequencer,
        signer,
        wallet,
        max_messages=4,
        ttl_seconds=300,
        clock=lambda: 1_700_000_000,
    )


@pytest.fixture
def waiter(ledger) -> ConfirmationWaiter:
    return ConfirmationWaiter(ledger, max_steps=5, interval_s=0.01, sleep=AsyncMock())


@pytest.fixture
def executor(ledger, sequencer, submitter, waiter) -> TransactionExecutor:
    return TransactionExecutor(ledger, sequencer, submitter, waiter)
