"""
Tests for the STON.fi swap status client.
"""

import httpx
import pytest

from ledger_agent.core.errors import ProviderError
from ledger_agent.providers.ston import StonStatusProvider

BASE_URL = "https://ston.test"
ROUTER = "0:" + "e1" * 32
OWNER = "0:" + "aa" * 32


def _provider(handler) -> StonStatusProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StonStatusProvider(base_url=BASE_URL, client=client)


class TestGetSwapStatus:
    """Tests for StonStatusProvider.get_swap_status."""

    @pytest.mark.asyncio
    async def test_found_snake_case(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(
                200,
                json={"@type": "Found", "exit_code": "swap_ok", "coins": "3100000", "tx_hash": "settle"},
            )

        status = await _provider(handler).get_swap_status(ROUTER, OWNER, 42)

        assert status.found
        assert status.is_ok
        assert status.coins == 3_100_000
        assert status.tx_hash == "settle"
        assert seen["url"].path == "/v1/swap/status"
        assert seen["url"].params["router_address"] == ROUTER
        assert seen["url"].params["owner_address"] == OWNER
        assert seen["url"].params["query_id"] == "42"

    @pytest.mark.asyncio
    async def test_found_camel_case(self):
        provider = _provider(
            lambda request: httpx.Response(
                200, json={"@type": "Found", "exitCode": "swap_refund_no_liq", "txHash": "t"}
            )
        )

        status = await provider.get_swap_status(ROUTER, OWNER, 1)

        assert status.found
        assert not status.is_ok
        assert status.exit_code == "swap_refund_no_liq"
        assert status.coins is None

    @pytest.mark.asyncio
    async def test_not_found(self):
        provider = _provider(lambda request: httpx.Response(200, json={"@type": "NotFound"}))

        status = await provider.get_swap_status(ROUTER, OWNER, 1)

        assert not status.found
        assert not status.is_ok

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        provider = _provider(lambda request: httpx.Response(502))

        with pytest.raises(ProviderError):
            await provider.get_swap_status(ROUTER, OWNER, 1)
