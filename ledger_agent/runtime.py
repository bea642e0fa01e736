"""
Runtime wiring for one TON wallet.

Usage:
    runtime = create_ton_runtime(WalletAccount(address, secret_key), signer)
    result = await runtime.batch.run_batch(items)
    await runtime.close()
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from .config import settings
from .core.batch import BatchCoordinator, TransferMessageBuilder
from .core.execution import (
    AccountSequencer,
    ConfirmationWaiter,
    EnvelopeSigner,
    ExternalStatusPoller,
    TransactionExecutor,
    TransactionSubmitter,
    WalletAccount,
)
from .core.pending import SessionRegistry
from .core.staking import (
    HipoStrategy,
    PlatformType,
    StakingService,
    StrategyRegistry,
    TonWhalesStrategy,
    load_pool_addresses,
)
from .core.swap import SwapRouter, SwapService
from .providers.base import GetMethodRunner, LedgerClient, SettlementStatusProvider
from .providers.ston import StonStatusProvider
from .providers.tonapi import TonApiProvider
from .providers.toncenter import ToncenterProvider

logger = logging.getLogger(__name__)


@dataclass
class TonRuntime:
    """Everything an action needs to act for one wallet."""
    wallet: WalletAccount
    ledger: LedgerClient
    get_methods: GetMethodRunner
    status_provider: SettlementStatusProvider
    sequencer: AccountSequencer
    executor: TransactionExecutor
    batch: BatchCoordinator
    registry: StrategyRegistry
    staking: StakingService
    sessions: SessionRegistry
    swap: Optional[SwapService] = None

    async def close(self) -> None:
        """Close the HTTP clients of providers that own one."""
        for provider in (self.ledger, self.get_methods, self.status_provider):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()

    async def health_check(self) -> Dict[str, Dict]:
        return {
            provider.name: await provider.health_check()
            for provider in (self.ledger, self.get_methods, self.status_provider)
        }


def create_ton_runtime(
    wallet: WalletAccount,
    signer: EnvelopeSigner,
    *,
    router: Optional[SwapRouter] = None,
    ledger: Optional[LedgerClient] = None,
    get_methods: Optional[GetMethodRunner] = None,
    status_provider: Optional[SettlementStatusProvider] = None,
    pool_addresses: Optional[Mapping[PlatformType, Sequence[str]]] = None,
) -> TonRuntime:
    """Build providers and services from settings; any provider can be injected."""
    ledger = ledger or ToncenterProvider()
    get_methods = get_methods or TonApiProvider()
    status_provider = status_provider or StonStatusProvider()

    sequencer = AccountSequencer(ledger)
    submitter = TransactionSubmitter(ledger, sequencer, signer, wallet)
    waiter = ConfirmationWaiter(ledger)
    executor = TransactionExecutor(ledger, sequencer, submitter, waiter)

    if pool_addresses is None and settings.staking_pools_file:
        pool_addresses = load_pool_addresses(settings.staking_pools_file)

    registry = StrategyRegistry(pool_addresses)
    registry.register(PlatformType.TON_WHALES, TonWhalesStrategy(get_methods, wallet))
    registry.register(PlatformType.HIPO, HipoStrategy(get_methods, wallet))

    swap = None
    if router is not None:
        swap = SwapService(executor, router, ExternalStatusPoller(status_provider))

    registered: List[str] = [p.value for p in registry.platforms()]
    logger.info(
        f"TON runtime ready for {wallet.address} on {settings.ton_network} "
        f"(staking platforms: {', '.join(registered)}, swaps: {'on' if swap else 'off'})"
    )

    return TonRuntime(
        wallet=wallet,
        ledger=ledger,
        get_methods=get_methods,
        status_provider=status_provider,
        sequencer=sequencer,
        executor=executor,
        batch=BatchCoordinator(executor, TransferMessageBuilder(wallet, get_methods)),
        registry=registry,
        staking=StakingService(executor, registry),
        sessions=SessionRegistry(),
        swap=swap,
    )
