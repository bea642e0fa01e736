"""TON Whales nominator pool strategy."""

from __future__ import annotations

import logging
import random
from typing import Tuple

from ...execution.models import MessageBody, OperationMessage, to_nano
from ..models import PlatformType, PoolInfo
from ..protocol import PoolStrategy

logger = logging.getLogger(__name__)

STAKE_OP = 2077040623
UNSTAKE_OP = 3665837821
GAS_COINS = 100000
UNSTAKE_VALUE = to_nano("0.2")

_MAX_QUERY_ID = 2**53 - 1


def generate_query_id() -> int:
    return random.randint(0, _MAX_QUERY_ID)


class TonWhalesStrategy(PoolStrategy):
    """Reads pool state through the pool's get-methods and builds deposit/withdraw messages."""

    platform = PlatformType.TON_WHALES

    async def _get_member(self, wallet_address: str, pool_address: str) -> Tuple[int, int]:
        """
        Return (balance, pending_withdraw) for the member.

        A short stack means the wallet is not a member and reads as zeros.
        Provider errors propagate.
        """
        result = await self.get_methods.run_get_method(pool_address, "get_member", wallet_address)
        if len(result.stack) < 2:
            logger.debug(f"{wallet_address} is not a member of {pool_address}")
            return 0, 0
        return result.int_at(0), result.int_at(1)

    async def get_staked_balance(self, wallet_address: str, pool_address: str) -> int:
        balance, pending_withdraw = await self._get_member(wallet_address, pool_address)
        return balance - pending_withdraw if pending_withdraw else balance

    async def get_pending_withdrawal(self, wallet_address: str, pool_address: str) -> int:
        _, pending_withdraw = await self._get_member(wallet_address, pool_address)
        return pending_withdraw

    async def get_pool_info(self, pool_address: str) -> PoolInfo:
        params = await self.get_methods.run_get_method(pool_address, "get_params")
        status = await self.get_methods.run_get_method(pool_address, "get_pool_status")

        # get_params: [enabled, updates_enabled, min_stake, deposit_fee, withdraw_fee, ...]
        # get_pool_status: [balance, balance_sent, pending_deposits, pending_withdraws, ...]
        return PoolInfo(
            address=pool_address,
            min_stake=params.int_at(2),
            deposit_fee=params.int_at(3),
            withdraw_fee=params.int_at(4),
            balance=status.int_at(0),
            pending_deposits=status.int_at(2),
            pending_withdraws=status.int_at(3),
        )

    async def build_stake_message(self, pool_address: str, amount: int) -> OperationMessage:
        body = MessageBody(
            op=STAKE_OP,
            query_id=generate_query_id(),
            fields=(("gas_limit", GAS_COINS),),
        )
        return OperationMessage(destination=pool_address, value=amount, payload=body, bounce=True)

    async def build_unstake_message(self, pool_address: str, amount: int) -> OperationMessage:
        body = MessageBody(
            op=UNSTAKE_OP,
            query_id=generate_query_id(),
            fields=(("gas_limit", GAS_COINS), ("amount", amount)),
        )
        return OperationMessage(destination=pool_address, value=UNSTAKE_VALUE, payload=body, bounce=True)
