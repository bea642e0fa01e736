"""Hipo liquid staking strategy.

Stakes go to the treasury; unstakes are sent to the wallet's hTON jetton
wallet, whose address comes from the treasury's parent contract. Positions
are held in hTON and converted at the treasury exchange rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal

from ...errors import StakingValidationError
from ...execution.models import MessageBody, OperationMessage
from ..models import PlatformType, PoolInfo
from ..protocol import PoolStrategy

logger = logging.getLogger(__name__)

DEPOSIT_COINS_OP = 0x3D3761A6
UNSTAKE_TOKENS_OP = 0x595F07BC
FEE_STAKE = 100000000
FEE_UNSTAKE = 100000000

_PARENT_INDEX = 5


@dataclass
class TreasuryState:
    total_coins: int
    total_tokens: int
    total_staking: int
    total_unstaking: int
    parent: str

    @property
    def exchange_rate(self) -> Decimal:
        """hTON per TON."""
        if not self.total_coins:
            return Decimal(0)
        return Decimal(self.total_tokens) / Decimal(self.total_coins)


def tokens_to_coins(tokens: int, rate: Decimal) -> int:
    if not rate or not tokens:
        return 0
    return int((Decimal(tokens) / rate).quantize(Decimal("1"), rounding=ROUND_DOWN))


def coins_to_tokens(coins: int, rate: Decimal) -> int:
    return int((Decimal(coins) * rate).quantize(Decimal("1"), rounding=ROUND_DOWN))


class HipoStrategy(PoolStrategy):
    platform = PlatformType.HIPO

    async def get_treasury_state(self, treasury_address: str) -> TreasuryState:
        result = await self.get_methods.run_get_method(treasury_address, "get_treasury_state")
        parent = result.stack[_PARENT_INDEX] if len(result.stack) > _PARENT_INDEX else None
        if not isinstance(parent, str):
            raise StakingValidationError(f"No parent in treasury state of {treasury_address}")
        return TreasuryState(
            total_coins=result.int_at(0),
            total_tokens=result.int_at(1),
            total_staking=result.int_at(2),
            total_unstaking=result.int_at(3),
            parent=parent,
        )

    async def get_hton_wallet(self, owner_address: str, treasury: TreasuryState) -> str:
        result = await self.get_methods.run_get_method(treasury.parent, "get_wallet_address", owner_address)
        wallet = result.stack[0] if result.stack else None
        if not isinstance(wallet, str):
            raise StakingValidationError(f"Parent {treasury.parent} returned no wallet address")
        return wallet

    async def _wallet_state(self, owner_address: str, treasury_address: str):
        """Return (tokens, unstaking, rate) for the owner's hTON wallet."""
        treasury = await self.get_treasury_state(treasury_address)
        wallet = await self.get_hton_wallet(owner_address, treasury)
        state = await self.get_methods.run_get_method(wallet, "get_wallet_state")
        # [tokens, staking (dict cell), unstaking]
        return state.int_at(0), state.int_at(2), treasury.exchange_rate

    async def get_staked_balance(self, wallet_address: str, pool_address: str) -> int:
        tokens, _, rate = await self._wallet_state(wallet_address, pool_address)
        return tokens_to_coins(tokens, rate)

    async def get_pending_withdrawal(self, wallet_address: str, pool_address: str) -> int:
        _, unstaking, rate = await self._wallet_state(wallet_address, pool_address)
        return tokens_to_coins(unstaking, rate)

    async def get_pool_info(self, pool_address: str) -> PoolInfo:
        treasury = await self.get_treasury_state(pool_address)
        rate = treasury.exchange_rate
        return PoolInfo(
            address=pool_address,
            min_stake=0,
            deposit_fee=FEE_STAKE,
            withdraw_fee=FEE_UNSTAKE,
            balance=tokens_to_coins(treasury.total_tokens, rate),
            pending_deposits=tokens_to_coins(treasury.total_staking, rate),
            pending_withdraws=tokens_to_coins(treasury.total_unstaking, rate),
        )

    async def build_stake_message(self, pool_address: str, amount: int) -> OperationMessage:
        body = MessageBody(
            op=DEPOSIT_COINS_OP,
            query_id=0,
            fields=(
                ("owner", None),
                ("coins", amount),
                ("ownership_assigned_amount", 1),
                ("referrer", None),
            ),
        )
        return OperationMessage(
            destination=pool_address,
            value=amount + FEE_STAKE,
            payload=body,
            bounce=True,
        )

    async def build_unstake_message(self, pool_address: str, amount: int) -> OperationMessage:
        treasury = await self.get_treasury_state(pool_address)
        rate = treasury.exchange_rate
        if not rate:
            raise StakingValidationError(f"Exchange rate unavailable for {pool_address}")

        tokens = coins_to_tokens(amount, rate)
        wallet = await self.get_hton_wallet(self.wallet.address, treasury)
        logger.debug(f"Unstaking {tokens} hTON from {wallet} (rate {rate})")

        body = MessageBody(
            op=UNSTAKE_TOKENS_OP,
            query_id=0,
            fields=(
                ("tokens", tokens),
                ("return_excess", None),
                ("mode", 0),
                ("ownership_assigned_amount", 1),
            ),
        )
        return OperationMessage(destination=wallet, value=FEE_UNSTAKE, payload=body, bounce=True)
