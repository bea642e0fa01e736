"""
Toncenter ledger client.

Seqno reads, envelope broadcast and last-transaction lookups go through the
v2 JSON-RPC endpoint; phase details come from the v3 indexer.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..core.errors import ProviderError
from ..core.execution.models import TransactionEnvelope, TransactionId, TransactionPhases
from .base import LedgerClient

logger = logging.getLogger(__name__)

_EMPTY_LT = "0"


def _parse_stack_number(entry: Any) -> int:
    # v2 stack entries look like ["num", "0x1a"]
    if isinstance(entry, (list, tuple)) and len(entry) == 2 and entry[0] == "num":
        return int(str(entry[1]), 16)
    raise ValueError(f"Unexpected stack entry: {entry!r}")


def parse_phases(tx: Dict[str, Any]) -> TransactionPhases:
    """Build TransactionPhases from a v3 ``/transactions`` item."""
    description = tx.get("description") or {}
    compute = description.get("compute_ph") or {}
    action = description.get("action")

    return TransactionPhases(
        hash=tx.get("hash", ""),
        compute_type=compute.get("type", "skipped"),
        compute_success=compute.get("success"),
        action_success=action.get("success") if action else None,
        action_valid=action.get("valid") if action else None,
        action_no_funds=action.get("no_funds") if action else None,
        aborted=bool(description.get("aborted", False)),
        exit_code=compute.get("exit_code"),
        result_code=action.get("result_code") if action else None,
    )


class ToncenterProvider(LedgerClient):
    """
    Ledger client backed by toncenter.com.

    Usage:
        provider = ToncenterProvider()
        seqno = await provider.get_seqno(wallet_address)
        tx_id = await provider.get_last_transaction(wallet_address)
    """

    name = "toncenter"
    timeout_s = 30

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        v3_base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: int = 3,
    ) -> None:
        self.base_url = (base_url or settings.toncenter_base_url).rstrip("/")
        self.v3_base_url = (v3_base_url or settings.toncenter_v3_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.toncenter_api_key
        self.timeout_s = settings.request_timeout_seconds
        self.max_retries = max_retries
        self._client = client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _rpc_call(self, method: str, params: Dict[str, Any]) -> Any:
        """Make a v2 JSON-RPC call, retrying transport failures."""
        client = await self._get_client()

        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }

        for attempt in range(self.max_retries):
            try:
                response = await client.post(self.base_url, json=payload, headers=self._headers())
                response.raise_for_status()
                data = response.json()

                if not data.get("ok", False) or "error" in data:
                    raise ProviderError(f"RPC error: {data.get('error', data)}", provider=self.name)

                return data.get("result")

            except httpx.HTTPStatusError as e:
                if attempt == self.max_retries - 1:
                    raise ProviderError(f"HTTP error: {e.response.status_code}", provider=self.name)
                await asyncio.sleep(0.5 * (attempt + 1))
            except ProviderError:
                raise
            except httpx.HTTPError as e:
                if attempt == self.max_retries - 1:
                    raise ProviderError(str(e), provider=self.name)
                await asyncio.sleep(0.5 * (attempt + 1))

        raise ProviderError("Max retries exceeded", provider=self.name)

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        try:
            result = await self._rpc_call("getMasterchainInfo", {})
            return {"status": "healthy", "seqno": (result or {}).get("last", {}).get("seqno")}
        except ProviderError as e:
            return {"status": "error", "reason": str(e)}

    async def get_seqno(self, address: str) -> int:
        result = await self._rpc_call(
            "runGetMethod",
            {"address": address, "method": "seqno", "stack": []},
        )
        # Uninitialised wallets have no code, so the get-method fails
        exit_code = (result or {}).get("exit_code", -1)
        stack = (result or {}).get("stack") or []
        if exit_code != 0 or not stack:
            return 0
        return _parse_stack_number(stack[0])

    async def send_envelope(self, envelope: TransactionEnvelope) -> str:
        if not envelope.is_signed:
            raise ProviderError("Envelope must be signed before sending", provider=self.name)

        boc = base64.b64encode(envelope.signature).decode()
        result = await self._rpc_call("sendBocReturnHash", {"boc": boc})
        envelope_hash = (result or {}).get("hash")
        if not envelope_hash:
            raise ProviderError("No hash returned from sendBocReturnHash", provider=self.name)
        return envelope_hash

    async def get_last_transaction(self, address: str) -> Optional[TransactionId]:
        result = await self._rpc_call("getAddressInformation", {"address": address})
        last = (result or {}).get("last_transaction_id") or {}
        lt = str(last.get("lt", _EMPTY_LT))
        if lt == _EMPTY_LT:
            return None
        return TransactionId(lt=lt, hash=last.get("hash", ""))

    async def get_transaction_phases(
        self, address: str, tx_id: TransactionId
    ) -> Optional[TransactionPhases]:
        client = await self._get_client()
        try:
            response = await client.get(
                f"{self.v3_base_url}/transactions",
                params={"account": address, "lt": tx_id.lt, "limit": 1},
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(f"Indexer error: {e}", provider=self.name) from e

        transactions = response.json().get("transactions") or []
        if not transactions:
            # Not indexed yet
            return None
        return parse_phases(transactions[0])
