"""
Transaction execution models and types.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, ROUND_DOWN
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import ConfirmationTimeoutError, ErrorCategory, TransactionFailedError

NANO = Decimal("1000000000")


def to_nano(amount: Union[Decimal, int, float, str]) -> int:
    """Convert a human amount (9 decimals) to nano units."""
    value = Decimal(str(amount)) if not isinstance(amount, Decimal) else amount
    return int((value * NANO).quantize(Decimal("1"), rounding=ROUND_DOWN))


def from_nano(amount: int) -> Decimal:
    """Convert nano units to a human amount."""
    return Decimal(amount) / NANO


@dataclass(frozen=True)
class MessageBody:
    """Contract call body carried by a message.

    The engine treats it as opaque; the signing collaborator encodes it.
    """
    op: int
    query_id: int = 0
    fields: Tuple[Tuple[str, Any], ...] = ()
    comment: Optional[str] = None

    def get_field(self, name: str) -> Any:
        for key, value in self.fields:
            if key == name:
                return value
        raise KeyError(name)


@dataclass(frozen=True)
class OperationMessage:
    """Internal message to send from the wallet."""
    destination: str
    value: int                                  # nano units
    payload: Optional[MessageBody] = None
    bounce: bool = True

    def __post_init__(self):
        if self.value < 0:
            raise ValueError("Message value must not be negative")


@dataclass(frozen=True)
class TransactionEnvelope:
    """A signed bundle of messages submitted under one seqno."""
    wallet_address: str
    seqno: int
    messages: Tuple[OperationMessage, ...]
    valid_until: int                            # unix seconds
    signature: bytes = b""                      # signed wire form, opaque

    def with_signature(self, signature: bytes) -> "TransactionEnvelope":
        return replace(self, signature=signature)

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)


@dataclass(frozen=True)
class WalletAccount:
    """The acting wallet: address plus the key handed to the signer."""
    address: str
    secret_key: bytes = field(repr=False)


@dataclass(frozen=True)
class TransactionId:
    """Last-transaction identifier of an account."""
    lt: str
    hash: str


@dataclass(frozen=True)
class TransactionPhases:
    """Compute/action phase results of one transaction."""
    hash: str
    compute_type: str = "vm"                    # "vm" or "skipped"
    compute_success: Optional[bool] = None
    action_success: Optional[bool] = None
    action_valid: Optional[bool] = None
    action_no_funds: Optional[bool] = None
    aborted: bool = False
    exit_code: Optional[int] = None
    result_code: Optional[int] = None

    @property
    def has_action_phase(self) -> bool:
        return self.action_success is not None


class ConfirmationOutcome(str, Enum):
    """Terminal confirmation classification."""
    SUCCESS = "success"
    COMPUTE_ERROR = "compute_error"
    INVALID_ACTION = "invalid_action"
    NO_FUNDS = "no_funds"
    GENERIC_FAILURE = "generic_failure"
    TIMED_OUT = "timed_out"


_OUTCOME_MESSAGES = {
    ConfirmationOutcome.COMPUTE_ERROR: "Transaction failed: compute phase error",
    ConfirmationOutcome.INVALID_ACTION: "Transaction failed: invalid action",
    ConfirmationOutcome.NO_FUNDS: "Transaction failed: no funds",
    ConfirmationOutcome.GENERIC_FAILURE: "Transaction failed",
    ConfirmationOutcome.TIMED_OUT: "Transaction confirmation timed out",
}

_OUTCOME_CATEGORIES = {
    ConfirmationOutcome.COMPUTE_ERROR: ErrorCategory.COMPUTE_ERROR,
    ConfirmationOutcome.INVALID_ACTION: ErrorCategory.INVALID_ACTION,
    ConfirmationOutcome.NO_FUNDS: ErrorCategory.NO_FUNDS,
    ConfirmationOutcome.GENERIC_FAILURE: ErrorCategory.TRANSACTION_FAILED,
}


@dataclass
class ConfirmationResult:
    """Result of waiting for an envelope to resolve."""
    outcome: ConfirmationOutcome
    tx_hash: Optional[str] = None
    envelope_hash: Optional[str] = None
    error: Optional[str] = None
    steps: int = 0
    resolved_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        if self.error is None and self.outcome != ConfirmationOutcome.SUCCESS:
            self.error = _OUTCOME_MESSAGES[self.outcome]

    @property
    def is_success(self) -> bool:
        return self.outcome == ConfirmationOutcome.SUCCESS

    @property
    def is_timeout(self) -> bool:
        return self.outcome == ConfirmationOutcome.TIMED_OUT

    @property
    def is_final(self) -> bool:
        """True when the outcome was observed on-ledger (success or explicit failure)."""
        return not self.is_timeout

    def raise_for_outcome(self) -> "ConfirmationResult":
        """Raise unless the envelope succeeded; returns self for chaining."""
        if self.is_success:
            return self
        if self.is_timeout:
            raise ConfirmationTimeoutError(
                self.error or "Transaction confirmation timed out",
                steps=self.steps,
                envelope_hash=self.envelope_hash,
            )
        raise TransactionFailedError(
            self.error or "Transaction failed",
            outcome=self.outcome.value,
            tx_hash=self.tx_hash,
            category=_OUTCOME_CATEGORIES.get(self.outcome),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "tx_hash": self.tx_hash,
            "envelope_hash": self.envelope_hash,
            "error": self.error,
            "steps": self.steps,
        }
