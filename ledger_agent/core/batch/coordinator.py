"""
Batch Coordinator

Turns a list of heterogeneous transfer requests into one envelope:

1. deduplicate (first occurrence wins)
2. build every surviving item independently; a build failure only fails
   that item's report
3. submit all built messages once under one seqno
4. confirm once and apply the envelope outcome to every pending report

All messages share one envelope, so a partial on-ledger failure cannot be
attributed to individual items; the envelope outcome is broadcast.
"""

import asyncio
import logging
from typing import List, Optional, Union

import structlog

from ..errors import ConfirmationTimeoutError, ExecutionError
from ..execution.executor import TransactionExecutor
from .builder import TransferMessageBuilder
from .dedup import deduplicate
from .models import BatchItem, BatchReport, BatchResult, BuiltTransfer

logger = logging.getLogger(__name__)
_slog = structlog.stdlib.get_logger("ton.batch")


class BatchCoordinator:
    """Runs batch transfers for one wallet."""

    def __init__(self, executor: TransactionExecutor, builder: TransferMessageBuilder):
        self.executor = executor
        self.builder = builder

    async def _build_one(self, item: BatchItem) -> Union[BuiltTransfer, BatchReport]:
        try:
            return await self.builder.build(item)
        except Exception as e:
            logger.error(f"Error building {item.type.value} transfer to {item.recipient_address}: {e}")
            report = BatchReport.for_item(item)
            report.mark_failure(str(e))
            return report

    async def run_batch(self, items: List[BatchItem]) -> BatchResult:
        unique = deduplicate(items)
        if len(unique) != len(items):
            logger.info(f"Batch deduplicated from {len(items)} to {len(unique)} items")

        built = await asyncio.gather(*(self._build_one(item) for item in unique))

        reports: List[BatchReport] = []
        transfers: List[BuiltTransfer] = []
        for entry in built:
            if isinstance(entry, BuiltTransfer):
                transfers.append(entry)
                reports.append(entry.report)
            else:
                reports.append(entry)

        result = BatchResult(reports=reports)
        if not transfers:
            logger.warning("No transfer in the batch could be built; nothing submitted")
            return result

        pending = [t.report for t in transfers]
        messages = [t.message for t in transfers]

        try:
            confirmation = await self.executor.submit_and_confirm(messages)
        except ConfirmationTimeoutError as e:
            # Broadcast but unresolved; the envelope may still land
            logger.error(f"Batch envelope {e.envelope_hash} unresolved: {e.message}")
            result.envelope_hash = e.envelope_hash
            self._fail_pending(pending, e.message)
            return result
        except ExecutionError as e:
            logger.error(f"Batch submission failed: {e.message}")
            self._fail_pending(pending, e.message)
            return result
        except Exception as e:
            logger.error(f"Batch submission failed: {e}")
            self._fail_pending(pending, str(e))
            return result

        result.envelope_hash = confirmation.envelope_hash
        result.tx_hash = confirmation.tx_hash

        if confirmation.is_success:
            for report in pending:
                if report.is_pending:
                    report.mark_success()
        else:
            self._fail_pending(pending, confirmation.error or "Transaction failed")

        _slog.info(
            "batch_completed",
            envelope_hash=result.envelope_hash,
            tx_hash=result.tx_hash,
            submitted=len(pending),
            **result.summary(),
        )
        return result

    @staticmethod
    def _fail_pending(reports: List[BatchReport], error: Optional[str]) -> None:
        for report in reports:
            if report.is_pending:
                report.mark_failure(error or "Transaction failed")
