"""SwapService runs DEX swaps through the transaction engine."""

from __future__ import annotations

import logging
import random
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from ...config import settings
from ..errors import ExecutionError, UnsupportedOperationError
from ..execution.executor import TransactionExecutor
from ..execution.models import to_nano
from ..execution.status_poller import ExternalStatusPoller
from ..pending.store import PendingOperation, PendingOperationStore
from .models import SwapAsset, SwapAssetKind, SwapResult, SwapRouter

SWAP_KIND = "swap"

_MAX_QUERY_ID = 2**53 - 1


class SwapService:
    """Submits a swap, waits for local confirmation, then for settlement on mainnet."""

    def __init__(
        self,
        executor: TransactionExecutor,
        router: SwapRouter,
        status_poller: Optional[ExternalStatusPoller] = None,
        *,
        wait_for_settlement: Optional[bool] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.executor = executor
        self.router = router
        self.status_poller = status_poller
        self.wait_for_settlement = settings.is_mainnet if wait_for_settlement is None else wait_for_settlement
        self._logger = logger or logging.getLogger(__name__)

    async def swap(
        self,
        asset_in: SwapAsset,
        asset_out: SwapAsset,
        amount_in: Union[Decimal, str, int],
    ) -> SwapResult:
        """
        Swap ``amount_in`` of ``asset_in`` for ``asset_out``.

        Raises:
            UnsupportedOperationError: TON -> TON
            TransactionFailedError / ConfirmationTimeoutError: local confirmation failed
            SettlementFailedError / SettlementTimeoutError: the DEX did not settle
        """
        if asset_in.kind == SwapAssetKind.TON and asset_out.kind == SwapAssetKind.TON:
            raise UnsupportedOperationError("Swapping TON for TON is not supported")

        query_id = random.randint(0, _MAX_QUERY_ID)
        message = await self.router.build_swap_message(
            self.executor.wallet.address,
            asset_in,
            asset_out,
            to_nano(amount_in),
            query_id,
        )

        result = await self.executor.submit_and_confirm([message])
        result.raise_for_outcome()

        swap = SwapResult(tx_hash=result.tx_hash, envelope_hash=result.envelope_hash, query_id=query_id)

        if self.wait_for_settlement and self.status_poller is not None:
            settlement = await self.status_poller.wait(
                self.router.router_address,
                self.executor.wallet.address,
                query_id,
            )
            swap.tx_hash = settlement.tx_hash or swap.tx_hash
            swap.amount_out = settlement.amount_out
            swap.settled = True

        self._logger.info(
            f"Swapped {amount_in} {asset_in.symbol} -> {asset_out.symbol}: tx={swap.tx_hash} out={swap.amount_out}"
        )
        return swap

    async def start_swap(
        self,
        store: PendingOperationStore,
        asset_in: SwapAsset,
        asset_out: SwapAsset,
        amount_in: Union[Decimal, str],
    ) -> PendingOperation:
        """Record a proposed swap awaiting confirmation."""
        operation = PendingOperation(
            kind=SWAP_KIND,
            params={
                "asset_in": asset_in.to_dict(),
                "asset_out": asset_out.to_dict(),
                "amount_in": str(amount_in),
            },
        )
        return await store.start(operation)

    async def _run_pending(self, operation: PendingOperation) -> SwapResult:
        if operation.kind != SWAP_KIND:
            raise ExecutionError(f"Pending operation is a {operation.kind}, not a swap")
        params: Dict[str, Any] = operation.params
        return await self.swap(
            SwapAsset.from_dict(params["asset_in"]),
            SwapAsset.from_dict(params["asset_out"]),
            params["amount_in"],
        )

    async def finish_swap(self, store: PendingOperationStore, decision: bool) -> Optional[SwapResult]:
        """Execute (True) or discard (False) the session's pending swap."""
        return await store.finish(decision, execute=self._run_pending)
