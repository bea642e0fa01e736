"""
Staking models and types.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List

from ..execution.models import from_nano


class PlatformType(str, Enum):
    """Staking platform families with a registered address list."""
    TON_WHALES = "TON_WHALES"
    HIPO = "HIPO"


class StakingOperation(str, Enum):
    """Capabilities a pool strategy may offer."""
    GET_STAKED_BALANCE = "get_staked_balance"
    GET_PENDING_WITHDRAWAL = "get_pending_withdrawal"
    GET_POOL_INFO = "get_pool_info"
    STAKE = "stake"
    UNSTAKE = "unstake"


ALL_OPERATIONS = frozenset(StakingOperation)


@dataclass
class PoolInfo:
    """Pool parameters and status; all amounts in nano TON."""
    address: str
    min_stake: int
    deposit_fee: int
    withdraw_fee: int
    balance: int
    pending_deposits: int
    pending_withdraws: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "min_stake": str(from_nano(self.min_stake)),
            "deposit_fee": str(from_nano(self.deposit_fee)),
            "withdraw_fee": str(from_nano(self.withdraw_fee)),
            "balance": str(from_nano(self.balance)),
            "pending_deposits": str(from_nano(self.pending_deposits)),
            "pending_withdraws": str(from_nano(self.pending_withdraws)),
        }


@dataclass
class StakingPosition:
    """The wallet's stake in one pool."""
    pool_address: str
    platform: PlatformType
    staked: int                                 # nano TON
    pending_withdrawal: int = 0                 # nano TON

    @property
    def is_empty(self) -> bool:
        return not self.staked and not self.pending_withdrawal


@dataclass
class StakingPortfolio:
    """Non-empty positions across every registered pool."""
    wallet_address: str
    positions: List[StakingPosition] = field(default_factory=list)

    @property
    def total_staked(self) -> int:
        return sum(p.staked for p in self.positions)

    @property
    def total_staked_ton(self) -> Decimal:
        return from_nano(self.total_staked)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wallet_address": self.wallet_address,
            "positions": [
                {
                    "pool_address": p.pool_address,
                    "platform": p.platform.value,
                    "staked": str(from_nano(p.staked)),
                    "pending_withdrawal": str(from_nano(p.pending_withdrawal)),
                }
                for p in self.positions
            ],
            "total_staked": str(self.total_staked_ton),
        }
