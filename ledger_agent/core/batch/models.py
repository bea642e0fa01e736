"""
Batch transfer models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ..execution.models import OperationMessage


class BatchItemType(str, Enum):
    TON = "ton"                                 # Native coin
    TOKEN = "token"                             # Jetton (fungible)
    NFT = "nft"


class BatchItem(BaseModel):
    """One requested transfer inside a batch."""

    type: BatchItemType
    recipient_address: str = Field(..., min_length=1, alias="recipientAddress")
    amount: Optional[str] = None
    token_id: Optional[str] = Field(default=None, alias="tokenId")
    jetton_master_address: Optional[str] = Field(default=None, alias="jettonMasterAddress")
    metadata: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="after")
    def _check_required_fields(self) -> "BatchItem":
        if self.type in (BatchItemType.TON, BatchItemType.TOKEN) and not self.amount:
            raise ValueError(f"Amount is required for {self.type.value} transfers")
        if self.type == BatchItemType.TOKEN and not self.jetton_master_address:
            raise ValueError("jettonMasterAddress is required for token transfers")
        if self.type == BatchItemType.NFT and not self.token_id:
            raise ValueError("tokenId is required for NFT transfers")
        return self


_BATCH_ADAPTER = TypeAdapter(Union[BatchItem, List[BatchItem]])


class BatchRequest:
    """Parses raw batch input (a single item or a list) into BatchItems."""

    @staticmethod
    def parse(data: Any) -> List[BatchItem]:
        """
        Raises:
            pydantic.ValidationError: if any item is malformed
        """
        parsed = _BATCH_ADAPTER.validate_python(data)
        return parsed if isinstance(parsed, list) else [parsed]


class ReportStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class BatchReport:
    """Per-item outcome; echoes the item identity."""
    type: BatchItemType
    recipient_address: str
    amount: Optional[str] = None
    token_id: Optional[str] = None
    jetton_master_address: Optional[str] = None
    status: ReportStatus = ReportStatus.PENDING
    error: Optional[str] = None

    @classmethod
    def for_item(cls, item: BatchItem, **kwargs: Any) -> "BatchReport":
        return cls(
            type=item.type,
            recipient_address=item.recipient_address,
            amount=item.amount,
            token_id=item.token_id,
            jetton_master_address=item.jetton_master_address,
            **kwargs,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == ReportStatus.PENDING

    def mark_success(self) -> None:
        self.status = ReportStatus.SUCCESS
        self.error = None

    def mark_failure(self, error: str) -> None:
        self.status = ReportStatus.FAILURE
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "recipientAddress": self.recipient_address,
            "status": self.status.value,
        }
        if self.amount is not None:
            data["amount"] = self.amount
        if self.token_id is not None:
            data["tokenId"] = self.token_id
        if self.jetton_master_address is not None:
            data["jettonMasterAddress"] = self.jetton_master_address
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class BuiltTransfer:
    """A batch item that produced a message."""
    report: BatchReport
    message: OperationMessage


@dataclass
class BatchResult:
    """Outcome of one batch: the shared envelope hash and one report per surviving item."""
    envelope_hash: Optional[str] = None
    reports: List[BatchReport] = field(default_factory=list)
    tx_hash: Optional[str] = None

    @property
    def succeeded(self) -> List[BatchReport]:
        return [r for r in self.reports if r.status == ReportStatus.SUCCESS]

    @property
    def failed(self) -> List[BatchReport]:
        return [r for r in self.reports if r.status == ReportStatus.FAILURE]

    def summary(self) -> Dict[str, int]:
        return {
            "total": len(self.reports),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.envelope_hash,
            "txHash": self.tx_hash,
            "reports": [r.to_dict() for r in self.reports],
        }
