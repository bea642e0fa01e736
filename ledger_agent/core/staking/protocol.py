"""Pool strategy interface.

A strategy is bound to one platform family and knows how to read positions
and pool state and how to build stake/unstake messages for pools of that
family. Strategies hold no state beyond their get-method runner and wallet.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, FrozenSet

from ..execution.models import OperationMessage, WalletAccount
from .models import ALL_OPERATIONS, PlatformType, PoolInfo, StakingOperation

if TYPE_CHECKING:
    from ...providers.base import GetMethodRunner


class PoolStrategy(ABC):
    """Base class for platform-specific staking strategies."""

    platform: PlatformType
    capabilities: FrozenSet[StakingOperation] = ALL_OPERATIONS

    def __init__(self, get_methods: GetMethodRunner, wallet: WalletAccount):
        self.get_methods = get_methods
        self.wallet = wallet

    def supports(self, operation: StakingOperation) -> bool:
        return operation in self.capabilities

    @abstractmethod
    async def get_staked_balance(self, wallet_address: str, pool_address: str) -> int:
        """Staked amount in nano TON (excluding pending withdrawals)."""

    @abstractmethod
    async def get_pending_withdrawal(self, wallet_address: str, pool_address: str) -> int:
        """Amount requested for withdrawal but not yet paid out, in nano TON."""

    @abstractmethod
    async def get_pool_info(self, pool_address: str) -> PoolInfo:
        ...

    @abstractmethod
    async def build_stake_message(self, pool_address: str, amount: int) -> OperationMessage:
        ...

    @abstractmethod
    async def build_unstake_message(self, pool_address: str, amount: int) -> OperationMessage:
        ...
