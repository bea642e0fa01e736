"""
Error Classification

Defines the error types raised by the transaction engine.
Batch build failures are captured per item; every other error propagates
to the calling action, which owns user-facing messaging.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of engine errors."""

    NETWORK = "network"                      # Transport/provider failure
    SEQUENCE_CONFLICT = "sequence_conflict"  # Seqno already in flight
    ENVELOPE = "envelope"                    # Envelope shape rejected locally
    COMPUTE_ERROR = "compute_error"          # Compute phase failed
    INVALID_ACTION = "invalid_action"        # Action phase rejected
    NO_FUNDS = "no_funds"                    # Action phase ran out of funds
    TRANSACTION_FAILED = "transaction_failed"
    TIMEOUT = "timeout"                      # Poll budget exhausted
    SETTLEMENT = "settlement"                # Out-of-band settlement failed
    BUILD = "build"                          # Message construction failed
    UNSUPPORTED = "unsupported"              # Capability not offered
    VALIDATION = "validation"                # Domain constraint violated
    CONFLICT = "conflict"                    # Pending operation slot taken
    UNKNOWN = "unknown"


class ExecutionError(Exception):
    """Base exception for engine errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        category: Optional[ErrorCategory] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        self.details = details or {}


class ProviderError(ExecutionError):
    """A ledger, indexer or status service returned an error."""

    category = ErrorCategory.NETWORK

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message, details={"provider": provider} if provider else None)
        self.provider = provider


class SequenceConflictError(ExecutionError):
    """An envelope for this seqno was already submitted and is unsettled."""

    category = ErrorCategory.SEQUENCE_CONFLICT

    def __init__(self, address: str, seqno: int):
        super().__init__(
            f"Sequence number {seqno} for {address} is already in flight",
            details={"address": address, "seqno": seqno},
        )
        self.address = address
        self.seqno = seqno


class EnvelopeError(ExecutionError):
    """Envelope cannot be built from the given messages."""

    category = ErrorCategory.ENVELOPE


class TransactionFailedError(ExecutionError):
    """Transaction was observed on-ledger but did not succeed."""

    category = ErrorCategory.TRANSACTION_FAILED

    def __init__(
        self,
        message: str,
        outcome: Optional[str] = None,
        tx_hash: Optional[str] = None,
        category: Optional[ErrorCategory] = None,
    ):
        super().__init__(
            message,
            category=category,
            details={"outcome": outcome, "tx_hash": tx_hash},
        )
        self.outcome = outcome
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(ExecutionError):
    """Confirmation budget exhausted; the envelope may still land."""

    category = ErrorCategory.TIMEOUT

    def __init__(
        self,
        message: str = "Transaction confirmation timed out",
        steps: Optional[int] = None,
        envelope_hash: Optional[str] = None,
    ):
        details = {}
        if steps is not None:
            details["steps"] = steps
        if envelope_hash is not None:
            details["envelope_hash"] = envelope_hash
        super().__init__(message, details=details)
        self.steps = steps
        self.envelope_hash = envelope_hash


class SettlementFailedError(ExecutionError):
    """Status service reported the operation as failed."""

    category = ErrorCategory.SETTLEMENT

    def __init__(self, message: str, exit_code: Optional[str] = None):
        super().__init__(message, details={"exit_code": exit_code})
        self.exit_code = exit_code


class SettlementTimeoutError(ExecutionError):
    """Status service never reported the operation within the budget."""

    category = ErrorCategory.TIMEOUT


class BuildError(ExecutionError):
    """A message could not be constructed for a batch item."""

    category = ErrorCategory.BUILD


class UnsupportedOperationError(ExecutionError):
    """Requested operation is outside a platform's capability set."""

    category = ErrorCategory.UNSUPPORTED


class StakingValidationError(ExecutionError):
    """Stake/unstake request violates a platform constraint."""

    category = ErrorCategory.VALIDATION


class PendingConflictError(ExecutionError):
    """A pending operation already occupies the session slot."""

    category = ErrorCategory.CONFLICT


class NoPendingOperationError(ExecutionError):
    """finish() was called without a pending operation."""

    category = ErrorCategory.CONFLICT
