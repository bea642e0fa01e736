"""
Transaction Execution Layer

Provides the infrastructure for submitting and confirming envelopes:
- TransactionExecutor: submit_and_confirm for one wallet
- AccountSequencer: per-account seqno reservation and in-flight tracking
- TransactionSubmitter: builds, signs and broadcasts envelopes
- ConfirmationWaiter / ExternalStatusPoller: bounded polling loops

Usage:
    from ledger_agent.core.execution import OperationMessage, to_nano

    result = await executor.submit_and_confirm([
        OperationMessage(destination=recipient, value=to_nano("1.5"), bounce=False),
    ])
    result.raise_for_outcome()
"""

from .models import (
    NANO,
    to_nano,
    from_nano,
    MessageBody,
    OperationMessage,
    TransactionEnvelope,
    WalletAccount,
    TransactionId,
    TransactionPhases,
    ConfirmationOutcome,
    ConfirmationResult,
)

from .sequencer import (
    AccountSequencer,
    SequenceState,
)

from .submitter import (
    EnvelopeSigner,
    TransactionSubmitter,
)

from .confirmation import (
    ConfirmationWaiter,
    classify_phases,
)

from .status_poller import (
    ExternalStatusPoller,
    SwapSettlement,
)

from .executor import (
    TransactionExecutor,
)

__all__ = [
    # Models
    "NANO",
    "to_nano",
    "from_nano",
    "MessageBody",
    "OperationMessage",
    "TransactionEnvelope",
    "WalletAccount",
    "TransactionId",
    "TransactionPhases",
    "ConfirmationOutcome",
    "ConfirmationResult",
    # Sequencer
    "AccountSequencer",
    "SequenceState",
    # Submitter
    "EnvelopeSigner",
    "TransactionSubmitter",
    # Polling
    "ConfirmationWaiter",
    "classify_phases",
    "ExternalStatusPoller",
    "SwapSettlement",
    # Executor
    "TransactionExecutor",
]
