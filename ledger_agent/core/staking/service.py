"""
Staking service.

Resolves the pool's strategy, validates the request against platform
constraints, builds the platform message and runs it through the
transaction executor.
"""

import asyncio
import logging
from decimal import Decimal
from typing import List, Optional, Union

from ..errors import StakingValidationError, UnsupportedOperationError
from ..execution.executor import TransactionExecutor
from ..execution.models import from_nano, to_nano
from .models import PoolInfo, StakingOperation, StakingPortfolio, StakingPosition
from .protocol import PoolStrategy
from .registry import StrategyRegistry

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]


def _require(strategy: PoolStrategy, operation: StakingOperation) -> None:
    if not strategy.supports(operation):
        raise UnsupportedOperationError(
            f"{strategy.platform.value} does not support {operation.value}",
            details={"platform": strategy.platform.value, "operation": operation.value},
        )


def _parse_amount(amount: Amount) -> int:
    try:
        value = to_nano(amount)
    except (ArithmeticError, ValueError) as e:
        raise StakingValidationError(f"Invalid amount: {amount}") from e
    if value <= 0:
        raise StakingValidationError(f"Amount must be positive: {amount}")
    return value


class StakingService:
    """
    Stake and unstake for one wallet across registered pools.

    ``stake``/``unstake`` return None when the pool belongs to no known
    platform; every other problem raises.
    """

    def __init__(self, executor: TransactionExecutor, registry: StrategyRegistry):
        self.executor = executor
        self.registry = registry

    @property
    def wallet_address(self) -> str:
        return self.executor.wallet.address

    async def stake(self, pool_address: str, amount: Amount) -> Optional[str]:
        """
        Stake ``amount`` TON into ``pool_address``.

        Returns:
            The envelope hash, or None if no strategy owns the pool

        Raises:
            UnsupportedOperationError: the platform cannot stake (no network call made)
            StakingValidationError: amount below the pool minimum
            TransactionFailedError / ConfirmationTimeoutError: from confirmation
        """
        strategy = self.registry.resolve(pool_address)
        if strategy is None:
            return None
        _require(strategy, StakingOperation.STAKE)

        value = _parse_amount(amount)
        if strategy.supports(StakingOperation.GET_POOL_INFO):
            info = await strategy.get_pool_info(pool_address)
            if value < info.min_stake:
                raise StakingValidationError(f"Minimum stake is {from_nano(info.min_stake)} TON")

        message = await strategy.build_stake_message(pool_address, value)
        result = await self.executor.submit_and_confirm([message])
        result.raise_for_outcome()

        logger.info(f"Staked {amount} TON into {pool_address}: {result.envelope_hash}")
        return result.envelope_hash

    async def unstake(self, pool_address: str, amount: Amount) -> Optional[str]:
        """
        Request withdrawal of ``amount`` TON from ``pool_address``.

        Raises:
            UnsupportedOperationError: the platform cannot unstake (no network call made)
            StakingValidationError: nothing is staked in the pool
        """
        strategy = self.registry.resolve(pool_address)
        if strategy is None:
            return None
        _require(strategy, StakingOperation.UNSTAKE)
        _require(strategy, StakingOperation.GET_STAKED_BALANCE)

        value = _parse_amount(amount)
        staked = await strategy.get_staked_balance(self.wallet_address, pool_address)
        if staked <= 0:
            raise StakingValidationError("No TON staked in the provided pool")

        message = await strategy.build_unstake_message(pool_address, value)
        result = await self.executor.submit_and_confirm([message])
        result.raise_for_outcome()

        logger.info(f"Unstaked {amount} TON from {pool_address}: {result.envelope_hash}")
        return result.envelope_hash

    async def get_pool_info(self, pool_address: str) -> Optional[PoolInfo]:
        strategy = self.registry.resolve(pool_address)
        if strategy is None:
            return None
        _require(strategy, StakingOperation.GET_POOL_INFO)
        return await strategy.get_pool_info(pool_address)

    async def _position(self, pool_address: str) -> Optional[StakingPosition]:
        strategy = self.registry.resolve(pool_address)
        if strategy is None:
            return None
        if not (
            strategy.supports(StakingOperation.GET_STAKED_BALANCE)
            and strategy.supports(StakingOperation.GET_PENDING_WITHDRAWAL)
        ):
            return None

        staked = await strategy.get_staked_balance(self.wallet_address, pool_address)
        pending = await strategy.get_pending_withdrawal(self.wallet_address, pool_address)
        return StakingPosition(
            pool_address=pool_address,
            platform=strategy.platform,
            staked=staked,
            pending_withdrawal=pending,
        )

    async def get_portfolio(self) -> StakingPortfolio:
        """Positions with a non-zero stake or pending withdrawal across all known pools."""
        addresses = self.registry.all_addresses()
        positions = await asyncio.gather(*(self._position(address) for address in addresses))

        kept: List[StakingPosition] = [p for p in positions if p is not None and not p.is_empty]
        return StakingPortfolio(wallet_address=self.wallet_address, positions=kept)
