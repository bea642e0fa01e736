"""
Envelope submission.

Wraps outbound messages into one signed envelope under a given seqno and
hands it to the ledger client. There is no retry here: a transport error
propagates and the seqno is released.
"""

import logging
import time
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Sequence

from ...config import settings
from ..errors import EnvelopeError
from .models import OperationMessage, TransactionEnvelope, WalletAccount
from .sequencer import AccountSequencer

if TYPE_CHECKING:
    from ...providers.base import LedgerClient

logger = logging.getLogger(__name__)


class EnvelopeSigner(Protocol):
    """Signs an envelope into its wire form. Cryptography lives outside the engine."""

    async def sign(self, envelope: TransactionEnvelope, secret_key: bytes) -> bytes:
        ...


class TransactionSubmitter:
    """Builds, signs and broadcasts envelopes for one wallet."""

    def __init__(
        self,
        ledger: "LedgerClient",
        sequencer: AccountSequencer,
        signer: EnvelopeSigner,
        wallet: WalletAccount,
        max_messages: Optional[int] = None,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._ledger = ledger
        self._sequencer = sequencer
        self._signer = signer
        self._wallet = wallet
        self._max_messages = max_messages or settings.max_messages_per_envelope
        self._ttl_seconds = ttl_seconds or settings.envelope_ttl_seconds
        self._clock = clock

    @property
    def wallet(self) -> WalletAccount:
        return self._wallet

    @property
    def max_messages(self) -> int:
        return self._max_messages

    def build_envelope(self, messages: Sequence[OperationMessage], seqno: int) -> TransactionEnvelope:
        """Validate the message list and build an unsigned envelope."""
        if not messages:
            raise EnvelopeError("Envelope must contain at least one message")
        if len(messages) > self._max_messages:
            raise EnvelopeError(
                f"Envelope holds at most {self._max_messages} messages, got {len(messages)}",
                details={"count": len(messages), "max": self._max_messages},
            )
        if seqno < 0:
            raise EnvelopeError(f"Invalid seqno: {seqno}")

        return TransactionEnvelope(
            wallet_address=self._wallet.address,
            seqno=seqno,
            messages=tuple(messages),
            valid_until=int(self._clock()) + self._ttl_seconds,
        )

    async def submit(self, messages: Sequence[OperationMessage], seqno: int) -> str:
        """
        Sign and broadcast ``messages`` under ``seqno``.

        Returns:
            The envelope (external message) hash reported by the ledger

        Raises:
            EnvelopeError: if the message list is empty or too long
            SequenceConflictError: if an unsettled envelope already used ``seqno``
        """
        envelope = self.build_envelope(messages, seqno)
        signature = await self._signer.sign(envelope, self._wallet.secret_key)
        signed = envelope.with_signature(signature)

        self._sequencer.mark_submitted(self._wallet.address, seqno)
        try:
            envelope_hash = await self._ledger.send_envelope(signed)
        except Exception as e:
            logger.warning(f"Send failed for seqno {seqno}, abandoning: {e}")
            self._sequencer.settle(self._wallet.address, seqno)
            raise

        logger.info(
            f"Submitted envelope {envelope_hash} seqno={seqno} "
            f"messages={len(messages)} valid_until={signed.valid_until}"
        )
        return envelope_hash

