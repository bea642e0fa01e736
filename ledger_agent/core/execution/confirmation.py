"""
Confirmation polling.

Detects that a submitted envelope was processed by watching the wallet's
last-transaction identifier, then inspects compute/action phases so a
reverted operation is never reported as success.
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from ...config import settings
from ..errors import ProviderError
from .models import ConfirmationOutcome, ConfirmationResult, TransactionId, TransactionPhases

if TYPE_CHECKING:
    from ...providers.base import LedgerClient

logger = logging.getLogger(__name__)


def classify_phases(phases: TransactionPhases) -> Optional[ConfirmationOutcome]:
    """
    Map phase results to an outcome.

    Returns None when the phases are inconclusive (no action phase yet).
    """
    if phases.compute_type != "vm" or phases.compute_success is False:
        return ConfirmationOutcome.COMPUTE_ERROR
    if not phases.has_action_phase:
        return None
    if phases.action_success:
        return ConfirmationOutcome.SUCCESS
    if phases.action_no_funds:
        return ConfirmationOutcome.NO_FUNDS
    if phases.action_valid is False:
        return ConfirmationOutcome.INVALID_ACTION
    return ConfirmationOutcome.GENERIC_FAILURE


class ConfirmationWaiter:
    """
    Polls the ledger until the envelope resolves or the step budget runs out.

    Usage:
        waiter = ConfirmationWaiter(ledger)
        previous = await ledger.get_last_transaction(address)
        ...submit...
        result = await waiter.wait(address, previous)
    """

    def __init__(
        self,
        ledger: "LedgerClient",
        max_steps: Optional[int] = None,
        interval_s: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ledger = ledger
        self.max_steps = max_steps if max_steps is not None else settings.tx_waiting_steps
        self.interval_s = interval_s if interval_s is not None else settings.tx_waiting_time_seconds
        self._sleep = sleep
        self._clock = clock

    async def wait(
        self,
        address: str,
        previous: Optional[TransactionId],
        *,
        envelope_hash: Optional[str] = None,
        deadline: Optional[float] = None,
    ) -> ConfirmationResult:
        """
        Wait for the account's next transaction and classify it.

        A failed classification is provisional: the new transaction becomes
        the observation point and polling continues, since a bounced attempt
        can land before the real one. The step budget is not reset after a
        provisional failure, so the whole wait stays within ``max_steps``
        polls. When the budget is exhausted the last observed failure is
        returned, or TIMED_OUT if nothing was observed.

        Args:
            address: Wallet whose transactions are watched
            previous: Last transaction id read before submission
            envelope_hash: Hash of the submitted envelope, echoed in the result
            deadline: Optional absolute time (per ``clock``) to give up at
        """
        observed = previous
        last_failure: Optional[ConfirmationResult] = None
        step = 0

        while step < self.max_steps:
            if deadline is not None and self._clock() >= deadline:
                logger.info(f"Confirmation deadline reached for {address} after {step} steps")
                break

            step += 1
            await self._sleep(self.interval_s)

            try:
                current = await self._ledger.get_last_transaction(address)
            except ProviderError as e:
                logger.debug(f"Last transaction lookup failed for {address}: {e}")
                continue

            if current is None or current == observed:
                continue

            try:
                phases = await self._ledger.get_transaction_phases(address, current)
            except ProviderError as e:
                logger.debug(f"Phase lookup failed for {current.hash}: {e}")
                continue

            if phases is None:
                continue

            outcome = classify_phases(phases)
            if outcome is None:
                continue

            result = ConfirmationResult(
                outcome=outcome,
                tx_hash=phases.hash or current.hash,
                envelope_hash=envelope_hash,
                steps=step,
            )
            if result.is_success:
                logger.info(f"Transaction {result.tx_hash} confirmed after {step} steps")
                return result

            logger.warning(f"Transaction {result.tx_hash} observed as {outcome.value}, still polling")
            last_failure = result
            observed = current

        if last_failure is not None:
            last_failure.steps = step
            return last_failure

        logger.warning(f"No transaction observed for {address} after {step} steps")
        return ConfirmationResult(
            outcome=ConfirmationOutcome.TIMED_OUT,
            envelope_hash=envelope_hash,
            steps=step,
        )
