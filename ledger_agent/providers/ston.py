"""Async client for the STON.fi swap status API."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..core.errors import ProviderError
from .base import SettlementStatusProvider, SwapStatus


class StonStatusProvider(SettlementStatusProvider):
    """Thin wrapper around the https://api.ston.fi swap status endpoint."""

    name = "ston"
    timeout_s = 20

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.ston_api_base_url).rstrip("/")
        self._client = client

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "LedgerAgentStonClient/2025-10",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}/v1/markets", headers=self._headers())
            response.raise_for_status()
            return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except httpx.HTTPError as e:
            return {"status": "error", "reason": str(e)}

    async def get_swap_status(self, router_address: str, owner_address: str, query_id: int) -> SwapStatus:
        client = await self._get_client()
        params = {
            "router_address": router_address,
            "owner_address": owner_address,
            "query_id": str(query_id),
        }

        try:
            response = await client.get(f"{self.base_url}/v1/swap/status", params=params, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(f"Swap status lookup failed: {e}", provider=self.name) from e

        data = response.json()
        if data.get("@type") != "Found":
            return SwapStatus(found=False, raw=data)

        # The API answers in snake_case; the official SDK re-cases to camelCase
        coins = data.get("coins")
        return SwapStatus(
            found=True,
            exit_code=data.get("exit_code", data.get("exitCode")),
            coins=int(coins) if coins not in (None, "") else None,
            tx_hash=data.get("tx_hash", data.get("txHash")),
            raw=data,
        )
