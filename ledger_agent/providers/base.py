from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.execution.models import TransactionEnvelope, TransactionId, TransactionPhases


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class LedgerClient(Provider):
    """Network client the transaction engine submits through and polls"""

    @abstractmethod
    async def get_seqno(self, address: str) -> int:
        """Current wallet sequence number (0 for an uninitialised wallet)"""
        pass

    @abstractmethod
    async def send_envelope(self, envelope: TransactionEnvelope) -> str:
        """Broadcast a signed envelope, returning its message hash"""
        pass

    @abstractmethod
    async def get_last_transaction(self, address: str) -> Optional[TransactionId]:
        """Identifier of the account's most recent transaction"""
        pass

    @abstractmethod
    async def get_transaction_phases(
        self, address: str, tx_id: TransactionId
    ) -> Optional[TransactionPhases]:
        """Compute/action phase detail, or None if not indexed yet"""
        pass


@dataclass
class GetMethodResult:
    """Decoded result of a contract get-method call."""
    exit_code: int
    stack: List[Any] = field(default_factory=list)
    decoded: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.exit_code in (0, 1)

    def int_at(self, index: int) -> int:
        value = self.stack[index]
        if not isinstance(value, int):
            raise ValueError(f"Stack entry {index} is not a number: {value!r}")
        return value


class GetMethodRunner(Provider):
    """Provider that executes read-only contract get-methods"""

    @abstractmethod
    async def run_get_method(self, address: str, method: str, *args: str) -> GetMethodResult:
        """Run ``method`` on ``address``; address arguments are passed as strings"""
        pass


@dataclass
class SwapStatus:
    """One observation from an out-of-band settlement status service."""
    found: bool
    exit_code: Optional[str] = None
    coins: Optional[int] = None
    tx_hash: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_ok(self) -> bool:
        return self.found and self.exit_code == "swap_ok"


class SettlementStatusProvider(Provider):
    """Provider reporting settlement of requests keyed by a query id"""

    @abstractmethod
    async def get_swap_status(self, router_address: str, owner_address: str, query_id: int) -> SwapStatus:
        """Status of the request identified by (router, owner, query id)"""
        pass
