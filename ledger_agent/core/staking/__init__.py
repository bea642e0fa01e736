"""
Staking across pool platforms.

Usage:
    registry = StrategyRegistry()
    registry.register(PlatformType.TON_WHALES, TonWhalesStrategy(get_methods, wallet))
    registry.register(PlatformType.HIPO, HipoStrategy(get_methods, wallet))

    service = StakingService(executor, registry)
    envelope_hash = await service.stake(pool_address, "10")
"""

from .models import (
    PlatformType,
    StakingOperation,
    ALL_OPERATIONS,
    PoolInfo,
    StakingPosition,
    StakingPortfolio,
)
from .config import STAKING_POOL_ADDRESSES, load_pool_addresses
from .protocol import PoolStrategy
from .registry import StrategyRegistry
from .strategies import HipoStrategy, TonWhalesStrategy
from .service import StakingService

__all__ = [
    "PlatformType",
    "StakingOperation",
    "ALL_OPERATIONS",
    "PoolInfo",
    "StakingPosition",
    "StakingPortfolio",
    "STAKING_POOL_ADDRESSES",
    "load_pool_addresses",
    "PoolStrategy",
    "StrategyRegistry",
    "HipoStrategy",
    "TonWhalesStrategy",
    "StakingService",
]
