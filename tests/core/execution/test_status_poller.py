"""
Tests for out-of-band settlement polling.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ledger_agent.core.errors import ProviderError, SettlementFailedError, SettlementTimeoutError
from ledger_agent.core.execution import ExternalStatusPoller
from ledger_agent.providers.base import SwapStatus

ROUTER = "0:" + "01" * 32
OWNER = "0:" + "02" * 32


def _poller(*statuses, max_steps: int = 5) -> ExternalStatusPoller:
    provider = MagicMock()
    provider.get_swap_status = AsyncMock(side_effect=list(statuses))
    return ExternalStatusPoller(provider, max_steps=max_steps, interval_s=0.01, sleep=AsyncMock())


class TestExternalStatusPoller:
    """Tests for ExternalStatusPoller.wait."""

    @pytest.mark.asyncio
    async def test_not_found_then_settled(self):
        poller = _poller(
            SwapStatus(found=False),
            SwapStatus(found=False),
            SwapStatus(found=True, exit_code="swap_ok", coins=1_500_000, tx_hash="swap-tx"),
        )

        settlement = await poller.wait(ROUTER, OWNER, 42)

        assert settlement.tx_hash == "swap-tx"
        assert settlement.amount_out == 1_500_000
        assert settlement.query_id == 42
        assert settlement.steps == 3
        poller._provider.get_swap_status.assert_awaited_with(ROUTER, OWNER, 42)

    @pytest.mark.asyncio
    async def test_found_with_failure_raises(self):
        poller = _poller(SwapStatus(found=False), SwapStatus(found=True, exit_code="slippage"))

        with pytest.raises(SettlementFailedError) as exc_info:
            await poller.wait(ROUTER, OWNER, 42)

        assert exc_info.value.exit_code == "slippage"

    @pytest.mark.asyncio
    async def test_exhausted_budget_raises(self):
        poller = _poller(*[SwapStatus(found=False)] * 3, max_steps=3)

        with pytest.raises(SettlementTimeoutError) as exc_info:
            await poller.wait(ROUTER, OWNER, 42)

        assert "failed/unknown" in str(exc_info.value)
        assert exc_info.value.details["steps"] == 3

    @pytest.mark.asyncio
    async def test_provider_error_counts_as_not_found(self):
        poller = _poller(
            ProviderError("502", provider="ston"),
            SwapStatus(found=True, exit_code="swap_ok", coins=10, tx_hash="t"),
        )

        settlement = await poller.wait(ROUTER, OWNER, 1)

        assert settlement.amount_out == 10
