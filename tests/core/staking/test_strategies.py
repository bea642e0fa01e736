"""
Tests for the TON Whales and Hipo pool strategies.
"""

import pytest

from ledger_agent.core.errors import ProviderError, StakingValidationError
from ledger_agent.core.execution import to_nano
from ledger_agent.core.staking import PlatformType, StakingOperation
from ledger_agent.core.staking.strategies import HipoStrategy, TonWhalesStrategy
from ledger_agent.core.staking.strategies.hipo import (
    DEPOSIT_COINS_OP,
    FEE_STAKE,
    FEE_UNSTAKE,
    UNSTAKE_TOKENS_OP,
    TreasuryState,
    coins_to_tokens,
    tokens_to_coins,
)
from ledger_agent.core.staking.strategies.ton_whales import STAKE_OP, UNSTAKE_OP, UNSTAKE_VALUE

WHALES_POOL = "0:" + "5a" * 32
TREASURY = "0:" + "6b" * 32
PARENT = "0:" + "7c" * 32
HTON_WALLET = "0:" + "8d" * 32


# =============================================================================
# TON Whales
# =============================================================================

class TestTonWhalesStrategy:
    """Tests for TonWhalesStrategy."""

    @pytest.fixture
    def strategy(self, get_methods, wallet):
        return TonWhalesStrategy(get_methods, wallet)

    @pytest.mark.asyncio
    async def test_balance_excludes_pending_withdrawal(self, strategy, get_methods, wallet):
        get_methods.set(WHALES_POOL, "get_member", [to_nano("10"), to_nano("2"), 0, 0], wallet.address)

        assert await strategy.get_staked_balance(wallet.address, WHALES_POOL) == to_nano("8")
        assert await strategy.get_pending_withdrawal(wallet.address, WHALES_POOL) == to_nano("2")

    @pytest.mark.asyncio
    async def test_non_member_has_zero_position(self, strategy, get_methods, wallet):
        """An empty member stack reads as an empty position."""
        get_methods.set(WHALES_POOL, "get_member", [], wallet.address)

        assert await strategy.get_staked_balance(wallet.address, WHALES_POOL) == 0
        assert await strategy.get_pending_withdrawal(wallet.address, WHALES_POOL) == 0

    @pytest.mark.asyncio
    async def test_member_lookup_outage_propagates(self, strategy, get_methods, wallet):
        get_methods.set(WHALES_POOL, "get_member", ProviderError("503 upstream", provider="fake"), wallet.address)

        with pytest.raises(ProviderError):
            await strategy.get_staked_balance(wallet.address, WHALES_POOL)

    @pytest.mark.asyncio
    async def test_pool_info(self, strategy, get_methods):
        get_methods.set(WHALES_POOL, "get_params", [-1, -1, to_nano("50"), to_nano("0.1"), to_nano("0.2")])
        get_methods.set(WHALES_POOL, "get_pool_status", [to_nano("1000"), 0, to_nano("5"), to_nano("3")])

        info = await strategy.get_pool_info(WHALES_POOL)

        assert info.min_stake == to_nano("50")
        assert info.deposit_fee == to_nano("0.1")
        assert info.withdraw_fee == to_nano("0.2")
        assert info.balance == to_nano("1000")
        assert info.pending_deposits == to_nano("5")
        assert info.pending_withdraws == to_nano("3")
        assert info.to_dict()["min_stake"] == "50"

    @pytest.mark.asyncio
    async def test_stake_message_carries_amount(self, strategy):
        message = await strategy.build_stake_message(WHALES_POOL, to_nano("60"))

        assert message.destination == WHALES_POOL
        assert message.value == to_nano("60")
        assert message.payload.op == STAKE_OP
        assert 0 <= message.payload.query_id <= 2**53 - 1

    @pytest.mark.asyncio
    async def test_unstake_message_attaches_fixed_fee(self, strategy):
        message = await strategy.build_unstake_message(WHALES_POOL, to_nano("5"))

        assert message.value == UNSTAKE_VALUE
        assert message.payload.op == UNSTAKE_OP
        assert message.payload.get_field("amount") == to_nano("5")

    def test_supports_everything(self, strategy):
        assert strategy.platform == PlatformType.TON_WHALES
        assert all(strategy.supports(op) for op in StakingOperation)


# =============================================================================
# Hipo
# =============================================================================

class TestHipoConversions:
    """Tests for hTON/TON conversion helpers."""

    def test_exchange_rate(self):
        state = TreasuryState(total_coins=2000, total_tokens=1000, total_staking=0, total_unstaking=0, parent=PARENT)
        assert float(state.exchange_rate) == 0.5

    def test_zero_coins_rate(self):
        state = TreasuryState(total_coins=0, total_tokens=0, total_staking=0, total_unstaking=0, parent=PARENT)
        assert not state.exchange_rate
        assert tokens_to_coins(100, state.exchange_rate) == 0

    def test_conversions_round_down(self):
        state = TreasuryState(total_coins=4, total_tokens=3, total_staking=0, total_unstaking=0, parent=PARENT)
        assert coins_to_tokens(10, state.exchange_rate) == 7
        assert tokens_to_coins(10, state.exchange_rate) == 13


class TestHipoStrategy:
    """Tests for HipoStrategy."""

    @pytest.fixture
    def strategy(self, get_methods, wallet):
        get_methods.set(TREASURY, "get_treasury_state", [2000, 1000, 100, 50, 0, PARENT])
        get_methods.set(PARENT, "get_wallet_address", [HTON_WALLET], wallet.address)
        get_methods.set(HTON_WALLET, "get_wallet_state", [500, None, 100])
        return HipoStrategy(get_methods, wallet)

    @pytest.mark.asyncio
    async def test_position_converted_at_rate(self, strategy, wallet):
        assert await strategy.get_staked_balance(wallet.address, TREASURY) == 1000
        assert await strategy.get_pending_withdrawal(wallet.address, TREASURY) == 200

    @pytest.mark.asyncio
    async def test_pool_info(self, strategy):
        info = await strategy.get_pool_info(TREASURY)

        assert info.min_stake == 0
        assert info.deposit_fee == FEE_STAKE
        assert info.balance == 2000
        assert info.pending_deposits == 200
        assert info.pending_withdraws == 100

    @pytest.mark.asyncio
    async def test_stake_adds_fee(self, strategy):
        message = await strategy.build_stake_message(TREASURY, to_nano("1"))

        assert message.destination == TREASURY
        assert message.value == to_nano("1") + FEE_STAKE
        assert message.payload.op == DEPOSIT_COINS_OP
        assert message.payload.get_field("coins") == to_nano("1")

    @pytest.mark.asyncio
    async def test_unstake_goes_to_hton_wallet(self, strategy):
        message = await strategy.build_unstake_message(TREASURY, 1000)

        assert message.destination == HTON_WALLET
        assert message.value == FEE_UNSTAKE
        assert message.payload.op == UNSTAKE_TOKENS_OP
        assert message.payload.get_field("tokens") == 500

    @pytest.mark.asyncio
    async def test_unstake_without_rate_fails(self, get_methods, wallet):
        get_methods.set(TREASURY, "get_treasury_state", [0, 0, 0, 0, 0, PARENT])
        strategy = HipoStrategy(get_methods, wallet)

        with pytest.raises(StakingValidationError):
            await strategy.build_unstake_message(TREASURY, 1000)

    @pytest.mark.asyncio
    async def test_missing_parent_fails(self, get_methods, wallet):
        get_methods.set(TREASURY, "get_treasury_state", [2000, 1000, 0, 0])
        strategy = HipoStrategy(get_methods, wallet)

        with pytest.raises(StakingValidationError):
            await strategy.get_pool_info(TREASURY)
