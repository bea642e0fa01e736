"""
Tests for transfer message construction.
"""

import pytest

from ledger_agent.core.batch import BatchItem, BatchItemType, TransferMessageBuilder
from ledger_agent.core.batch.builder import (
    DEFAULT_COMMENT,
    JETTON_FORWARD_VALUE,
    JETTON_TRANSFER_OP,
    JETTON_TRANSFER_VALUE,
    NFT_FORWARD_VALUE,
    NFT_TRANSFER_OP,
    NFT_TRANSFER_VALUE,
)
from ledger_agent.core.errors import BuildError, ProviderError
from ledger_agent.core.execution import to_nano

RECIPIENT = "0:" + "0a" * 32
MASTER = "0:" + "1c" * 32
JETTON_WALLET = "0:" + "3d" * 32
NFT_ITEM = "0:" + "2e" * 32


@pytest.fixture
def builder(wallet, get_methods) -> TransferMessageBuilder:
    return TransferMessageBuilder(wallet, get_methods)


class TestTonTransfer:
    """Tests for native transfers."""

    @pytest.mark.asyncio
    async def test_ton_transfer(self, builder):
        item = BatchItem(type=BatchItemType.TON, recipient_address=RECIPIENT, amount="1.5")

        built = await builder.build(item)

        assert built.message.destination == RECIPIENT
        assert built.message.value == 1_500_000_000
        assert built.message.payload is None
        assert built.report.is_pending

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "NaN"])
    async def test_bad_amount_fails(self, builder, amount):
        item = BatchItem(type=BatchItemType.TON, recipient_address=RECIPIENT, amount=amount)

        with pytest.raises(BuildError):
            await builder.build(item)

    @pytest.mark.asyncio
    async def test_bad_recipient_fails(self, builder):
        item = BatchItem(type=BatchItemType.TON, recipient_address="not-an-address", amount="1")

        with pytest.raises(BuildError, match="recipient"):
            await builder.build(item)


class TestTokenTransfer:
    """Tests for jetton transfers."""

    @pytest.mark.asyncio
    async def test_token_transfer_goes_to_own_jetton_wallet(self, builder, get_methods, wallet):
        get_methods.set(MASTER, "get_wallet_address", [JETTON_WALLET], wallet.address)
        item = BatchItem(
            type=BatchItemType.TOKEN, recipient_address=RECIPIENT, amount="5", jetton_master_address=MASTER
        )

        built = await builder.build(item)

        message = built.message
        assert message.destination == JETTON_WALLET
        assert message.value == JETTON_TRANSFER_VALUE
        assert message.payload.op == JETTON_TRANSFER_OP
        assert message.payload.get_field("amount") == to_nano("5")
        assert message.payload.get_field("destination") == RECIPIENT
        assert message.payload.get_field("forward_ton_amount") == JETTON_FORWARD_VALUE
        assert message.payload.comment == DEFAULT_COMMENT
        assert get_methods.calls == [(MASTER, "get_wallet_address", (wallet.address,))]

    @pytest.mark.asyncio
    async def test_metadata_becomes_comment(self, builder, get_methods, wallet):
        get_methods.set(MASTER, "get_wallet_address", [JETTON_WALLET], wallet.address)
        item = BatchItem(
            type=BatchItemType.TOKEN,
            recipient_address=RECIPIENT,
            amount="5",
            jetton_master_address=MASTER,
            metadata="invoice 12",
        )

        built = await builder.build(item)

        assert built.message.payload.comment == "invoice 12"

    @pytest.mark.asyncio
    async def test_unresolvable_master_fails(self, builder, get_methods):
        get_methods.set(MASTER, "get_wallet_address", ProviderError("bad asset", provider="fake"))
        item = BatchItem(
            type=BatchItemType.TOKEN, recipient_address=RECIPIENT, amount="5", jetton_master_address=MASTER
        )

        with pytest.raises(BuildError, match="bad asset"):
            await builder.build(item)


class TestNftTransfer:
    """Tests for NFT transfers."""

    @pytest.mark.asyncio
    async def test_nft_transfer_goes_to_item(self, builder, wallet):
        item = BatchItem(type=BatchItemType.NFT, recipient_address=RECIPIENT, token_id=NFT_ITEM)

        built = await builder.build(item)

        message = built.message
        assert message.destination == NFT_ITEM
        assert message.value == NFT_TRANSFER_VALUE
        assert message.payload.op == NFT_TRANSFER_OP
        assert message.payload.get_field("new_owner") == RECIPIENT
        assert message.payload.get_field("response_destination") == wallet.address
        assert message.payload.get_field("forward_amount") == NFT_FORWARD_VALUE
