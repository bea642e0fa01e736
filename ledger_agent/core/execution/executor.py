"""
Transaction executor.

Handles the full lifecycle of one envelope:
- Seqno reservation
- Envelope submission
- Confirmation monitoring
"""

import logging
import time
from typing import TYPE_CHECKING, Optional, Sequence

import structlog

from ...logging_config import account_context
from ..errors import ConfirmationTimeoutError
from .confirmation import ConfirmationWaiter
from .models import ConfirmationResult, OperationMessage, WalletAccount
from .sequencer import AccountSequencer
from .submitter import TransactionSubmitter

if TYPE_CHECKING:
    from ...providers.base import LedgerClient


logger = logging.getLogger(__name__)
_slog = structlog.stdlib.get_logger("ton.executor")


class TransactionExecutor:
    """
    Submits messages from one wallet and waits for them to resolve.

    The account stays locked from the seqno read until confirmation
    resolves, so at most one envelope per account is outstanding.
    """

    def __init__(
        self,
        ledger: "LedgerClient",
        sequencer: AccountSequencer,
        submitter: TransactionSubmitter,
        waiter: ConfirmationWaiter,
    ):
        self.ledger = ledger
        self.sequencer = sequencer
        self.submitter = submitter
        self.waiter = waiter

    @property
    def wallet(self) -> WalletAccount:
        return self.submitter.wallet

    @property
    def max_messages(self) -> int:
        return self.submitter.max_messages

    async def submit_and_confirm(
        self,
        messages: Sequence[OperationMessage],
        deadline: Optional[float] = None,
    ) -> ConfirmationResult:
        """
        Submit ``messages`` in one envelope and wait for the outcome.

        Explicit on-ledger failures are returned as results; call
        ``raise_for_outcome()`` to turn them into exceptions.

        Raises:
            ConfirmationTimeoutError: nothing was observed within the budget.
                The envelope may still land, so callers must not treat this
                as "did not happen".
        """
        address = self.wallet.address
        _start = time.perf_counter()

        with account_context(address):
            async with self.sequencer.reserve(address) as seqno:
                previous = await self.ledger.get_last_transaction(address)
                envelope_hash = await self.submitter.submit(messages, seqno)
                result = await self.waiter.wait(
                    address,
                    previous,
                    envelope_hash=envelope_hash,
                    deadline=deadline,
                )

            _slog.info(
                "envelope_resolved",
                seqno=seqno,
                messages=len(messages),
                envelope_hash=envelope_hash,
                tx_hash=result.tx_hash,
                outcome=result.outcome.value,
                steps=result.steps,
                duration_ms=round((time.perf_counter() - _start) * 1000, 1),
            )

        if result.is_timeout:
            logger.error(f"Envelope {envelope_hash} unresolved after {result.steps} steps")
            raise ConfirmationTimeoutError(
                result.error or "Transaction confirmation timed out",
                steps=result.steps,
                envelope_hash=envelope_hash,
            )

        if not result.is_success:
            logger.warning(f"Envelope {envelope_hash} resolved as {result.outcome.value}: {result.error}")

        return result
