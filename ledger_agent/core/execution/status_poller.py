"""
Out-of-band settlement polling.

Some operations (swaps) only report their final result through an external
status service keyed by a caller-chosen query id. Runs after local
confirmation has shown the request was accepted.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from ...config import settings
from ..errors import ProviderError, SettlementFailedError, SettlementTimeoutError

if TYPE_CHECKING:
    from ...providers.base import SettlementStatusProvider

logger = logging.getLogger(__name__)


@dataclass
class SwapSettlement:
    """Settlement data reported by the status service."""
    query_id: int
    tx_hash: Optional[str] = None
    amount_out: Optional[int] = None            # nano units of the output asset
    steps: int = 0


class ExternalStatusPoller:
    """Polls a status provider until the request is found, fails, or the budget runs out."""

    def __init__(
        self,
        provider: "SettlementStatusProvider",
        max_steps: Optional[int] = None,
        interval_s: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._provider = provider
        self.max_steps = max_steps if max_steps is not None else settings.swap_waiting_steps
        self.interval_s = interval_s if interval_s is not None else settings.swap_waiting_time_seconds
        self._sleep = sleep
        self._clock = clock

    async def wait(
        self,
        router_address: str,
        owner_address: str,
        query_id: int,
        *,
        deadline: Optional[float] = None,
    ) -> SwapSettlement:
        """
        Wait for the status service to report the request.

        Raises:
            SettlementFailedError: the service found the request with a non-ok exit code
            SettlementTimeoutError: the step budget or deadline ran out
        """
        step = 0
        while step < self.max_steps:
            if deadline is not None and self._clock() >= deadline:
                break

            step += 1
            await self._sleep(self.interval_s)

            try:
                status = await self._provider.get_swap_status(router_address, owner_address, query_id)
            except ProviderError as e:
                logger.debug(f"Status lookup failed for query {query_id}: {e}")
                continue

            if not status.found:
                continue

            if status.is_ok:
                logger.info(f"Swap {query_id} settled in {status.tx_hash} after {step} steps")
                return SwapSettlement(
                    query_id=query_id,
                    tx_hash=status.tx_hash,
                    amount_out=status.coins,
                    steps=step,
                )

            logger.warning(f"Swap {query_id} failed with exit code {status.exit_code}")
            raise SettlementFailedError(
                f"Swap failed with exit code {status.exit_code}",
                exit_code=status.exit_code,
            )

        raise SettlementTimeoutError(
            "Swap failed/unknown",
            details={"query_id": query_id, "steps": step},
        )
