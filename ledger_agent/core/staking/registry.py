"""Strategy Registry mapping pool addresses to platform strategies.

The address table is read-only after construction; strategies are
registered once at startup.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from ...services.address import normalize_ton_address
from .config import STAKING_POOL_ADDRESSES
from .models import PlatformType
from .protocol import PoolStrategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Resolves a pool address to the strategy of the platform that owns it.

    Usage:
        registry = StrategyRegistry()
        registry.register(PlatformType.HIPO, HipoStrategy(get_methods, wallet))
        strategy = registry.resolve(pool_address)  # None if unknown

    Adding a platform means adding its address list and registering a
    strategy; callers do not change.
    """

    def __init__(self, addresses: Optional[Mapping[PlatformType, Sequence[str]]] = None):
        table = addresses if addresses is not None else STAKING_POOL_ADDRESSES

        self._addresses: Dict[PlatformType, List[str]] = {}
        self._platform_index: Dict[str, PlatformType] = {}
        self._strategies: Dict[PlatformType, PoolStrategy] = {}

        for platform, pool_addresses in table.items():
            self._addresses[platform] = list(pool_addresses)
            for address in pool_addresses:
                self._platform_index[normalize_ton_address(address)] = platform

    def register(self, platform: PlatformType, strategy: PoolStrategy) -> None:
        if platform in self._strategies:
            logger.warning(f"Replacing strategy for platform {platform.value}")
        self._strategies[platform] = strategy

    def platform_for(self, pool_address: str) -> Optional[PlatformType]:
        try:
            return self._platform_index.get(normalize_ton_address(pool_address))
        except ValueError:
            return None

    def resolve(self, pool_address: str) -> Optional[PoolStrategy]:
        platform = self.platform_for(pool_address)
        if platform is None:
            logger.info(f"Unknown platform address: {pool_address}")
            return None

        strategy = self._strategies.get(platform)
        if strategy is None:
            logger.warning(f"No strategy implemented for platform: {platform.value}")
            return None

        logger.debug(f"Found strategy for platform: {platform.value}")
        return strategy

    def all_addresses(self) -> List[str]:
        return [address for addresses in self._addresses.values() for address in addresses]

    def addresses_for(self, platform: PlatformType) -> List[str]:
        return list(self._addresses.get(platform, []))

    def platforms(self) -> List[PlatformType]:
        return list(self._addresses)

    def strategies(self) -> List[PoolStrategy]:
        return list(self._strategies.values())
