"""
Message construction for batch transfers.

Each item is built on its own; a BuildError here only fails that item.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Optional

from ...services.address import normalize_ton_address
from ..errors import BuildError, ProviderError
from ..execution.models import MessageBody, OperationMessage, WalletAccount, to_nano
from .models import BatchItem, BatchItemType, BatchReport, BuiltTransfer

if TYPE_CHECKING:
    from ...providers.base import GetMethodRunner

logger = logging.getLogger(__name__)

JETTON_TRANSFER_OP = 0x0F8A7EA5
NFT_TRANSFER_OP = 0x5FCC3D14

JETTON_TRANSFER_VALUE = to_nano("0.1")          # attached for jetton wallet gas
JETTON_FORWARD_VALUE = to_nano("0.02")
NFT_TRANSFER_VALUE = to_nano("0.05")
NFT_FORWARD_VALUE = to_nano("0.01")

DEFAULT_COMMENT = "Hello, TON!"


def _parse_address(address: Optional[str], label: str) -> str:
    try:
        return normalize_ton_address(address or "")
    except ValueError as e:
        raise BuildError(f"Invalid {label} address: {address}") from e


def _parse_amount(amount: Optional[str]) -> int:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise BuildError(f"Invalid amount: {amount}") from e
    if not value.is_finite() or value <= 0:
        raise BuildError(f"Invalid amount: {amount}")
    return to_nano(value)


class TransferMessageBuilder:
    """Builds OperationMessages for TON, jetton and NFT transfers."""

    def __init__(self, wallet: WalletAccount, get_methods: "GetMethodRunner"):
        self.wallet = wallet
        self.get_methods = get_methods

    async def build(self, item: BatchItem) -> BuiltTransfer:
        """
        Raises:
            BuildError: if the item cannot be turned into a message
        """
        recipient = _parse_address(item.recipient_address, "recipient")

        if item.type == BatchItemType.TON:
            message = self.build_ton_transfer(recipient, item)
        elif item.type == BatchItemType.TOKEN:
            logger.debug(f"Building token transfer to {recipient} for {item.jetton_master_address}")
            message = await self.build_token_transfer(recipient, item)
        elif item.type == BatchItemType.NFT:
            message = self.build_nft_transfer(recipient, item)
        else:
            raise BuildError(f"Unsupported transfer type: {item.type}")

        return BuiltTransfer(report=BatchReport.for_item(item), message=message)

    def build_ton_transfer(self, recipient: str, item: BatchItem) -> OperationMessage:
        return OperationMessage(
            destination=recipient,
            value=_parse_amount(item.amount),
            bounce=True,
        )

    async def resolve_jetton_wallet(self, jetton_master: str) -> str:
        """Ask the jetton master for this wallet's jetton wallet address."""
        try:
            result = await self.get_methods.run_get_method(
                jetton_master, "get_wallet_address", self.wallet.address
            )
        except ProviderError as e:
            raise BuildError(f"Could not resolve jetton wallet: {e.message}") from e

        jetton_wallet = result.stack[0] if result.stack else None
        if not isinstance(jetton_wallet, str):
            raise BuildError(f"Jetton master {jetton_master} returned no wallet address")
        return jetton_wallet

    async def build_token_transfer(self, recipient: str, item: BatchItem) -> OperationMessage:
        jetton_master = _parse_address(item.jetton_master_address, "jetton master")
        amount = _parse_amount(item.amount)
        jetton_wallet = await self.resolve_jetton_wallet(jetton_master)

        body = MessageBody(
            op=JETTON_TRANSFER_OP,
            query_id=0,
            fields=(
                ("amount", amount),
                ("destination", recipient),
                ("response_destination", recipient),
                ("custom_payload", None),
                ("forward_ton_amount", JETTON_FORWARD_VALUE),
            ),
            comment=item.metadata or DEFAULT_COMMENT,
        )
        return OperationMessage(
            destination=jetton_wallet,
            value=JETTON_TRANSFER_VALUE,
            payload=body,
            bounce=True,
        )

    def build_nft_transfer(self, recipient: str, item: BatchItem) -> OperationMessage:
        nft_item = _parse_address(item.token_id, "token")

        body = MessageBody(
            op=NFT_TRANSFER_OP,
            query_id=0,
            fields=(
                ("new_owner", recipient),
                ("response_destination", self.wallet.address),
                ("custom_payload", None),
                ("forward_amount", NFT_FORWARD_VALUE),
                ("forward_payload", None),
            ),
        )
        return OperationMessage(
            destination=nft_item,
            value=NFT_TRANSFER_VALUE,
            payload=body,
            bounce=True,
        )
