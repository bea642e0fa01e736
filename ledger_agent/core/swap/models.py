"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from ..execution.models import OperationMessage


class SwapAssetKind(str, Enum):
    TON = "Ton"
    JETTON = "Jetton"


@dataclass(frozen=True)
class SwapAsset:
    """One side of a swap."""

    kind: SwapAssetKind
    symbol: str
    contract_address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "symbol": self.symbol,
            "contract_address": self.contract_address,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SwapAsset:
        return cls(
            kind=SwapAssetKind(data["kind"]),
            symbol=data["symbol"],
            contract_address=data.get("contract_address"),
        )


@dataclass
class SwapResult:
    """Structured result of an executed swap."""

    tx_hash: Optional[str]
    amount_out: Optional[int] = None            # nano units; known only once settled
    envelope_hash: Optional[str] = None
    query_id: Optional[int] = None
    settled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "amount_out": str(self.amount_out) if self.amount_out is not None else None,
            "envelope_hash": self.envelope_hash,
            "query_id": self.query_id,
            "settled": self.settled,
        }


class SwapRouter(Protocol):
    """DEX router collaborator that encodes swap messages."""

    @property
    def router_address(self) -> str:
        ...

    async def build_swap_message(
        self,
        user_address: str,
        asset_in: SwapAsset,
        asset_out: SwapAsset,
        amount_in: int,
        query_id: int,
    ) -> OperationMessage:
        ...
