"""
Batch transfers: deduplicate, build per item, submit once, confirm once.
"""

from .models import (
    BatchItemType,
    BatchItem,
    BatchRequest,
    ReportStatus,
    BatchReport,
    BuiltTransfer,
    BatchResult,
)
from .dedup import deduplicate
from .builder import TransferMessageBuilder
from .coordinator import BatchCoordinator

__all__ = [
    "BatchItemType",
    "BatchItem",
    "BatchRequest",
    "ReportStatus",
    "BatchReport",
    "BuiltTransfer",
    "BatchResult",
    "deduplicate",
    "TransferMessageBuilder",
    "BatchCoordinator",
]
