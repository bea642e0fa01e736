"""Async client for TonAPI contract get-methods."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.errors import ProviderError
from ..services.address import address_from_boc
from .base import GetMethodResult, GetMethodRunner

logger = logging.getLogger(__name__)


def decode_stack_entry(entry: Dict[str, Any]) -> Any:
    """Turn a TonAPI stack entry into a Python value.

    Numbers become ints, cells and slices holding an address become the raw
    ``wc:hex`` form; other cells are returned as their BOC string.
    """
    kind = entry.get("type")
    if kind == "num":
        return int(str(entry.get("num", "0")), 16)
    if kind == "null":
        return None
    if kind in ("cell", "slice"):
        boc = entry.get(kind) or ""
        try:
            return address_from_boc(boc)
        except (ValueError, IndexError):
            return boc
    if kind == "tuple":
        return [decode_stack_entry(item) for item in entry.get("tuple") or []]
    return entry


class TonApiProvider(GetMethodRunner):
    """Thin wrapper around https://tonapi.io get-method endpoints."""

    name = "tonapi"
    timeout_s = 20

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = (base_url or settings.tonapi_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.tonapi_api_key
        self._client = client

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

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
            response = await client.get(f"{self.base_url}/v2/status", headers=self._headers())
            response.raise_for_status()
            return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except httpx.HTTPError as e:
            return {"status": "error", "reason": str(e)}

    async def run_get_method(self, address: str, method: str, *args: str) -> GetMethodResult:
        client = await self._get_client()
        params: List[tuple] = [("args", arg) for arg in args]

        try:
            response = await client.get(
                f"{self.base_url}/v2/blockchain/accounts/{address}/methods/{method}",
                params=params,
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Get-method {method} on {address} failed: HTTP {e.response.status_code}",
                provider=self.name,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Get-method {method} on {address} failed: {e}", provider=self.name) from e

        data = response.json()
        result = GetMethodResult(
            exit_code=int(data.get("exit_code", 0)),
            stack=[decode_stack_entry(item) for item in data.get("stack") or []],
            decoded=data.get("decoded") or {},
        )
        if not data.get("success", True) or not result.success:
            raise ProviderError(
                f"Get-method {method} on {address} exited with code {result.exit_code}",
                provider=self.name,
            )
        return result
