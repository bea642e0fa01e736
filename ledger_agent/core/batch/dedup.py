"""Deduplication of batch transfer items."""

import logging
from typing import Dict, List, Optional, Set

from ...services.address import normalize_ton_address
from .models import BatchItem, BatchItemType

logger = logging.getLogger(__name__)

# Kinds that exclude each other for a single recipient
_EXCLUSIVE_KINDS = {BatchItemType.TOKEN, BatchItemType.NFT}


def _address_key(address: Optional[str]) -> str:
    if not address:
        return ""
    try:
        return normalize_ton_address(address)
    except ValueError:
        return address


def deduplicate(items: List[BatchItem]) -> List[BatchItem]:
    """
    Drop colliding items, keeping the first occurrence.

    - one TON transfer per recipient
    - one token transfer per jetton master
    - one NFT transfer per token id
    - a recipient with a token or NFT transfer gets no second one of either kind

    Dropped items are not reported.
    """
    kept: Dict[str, BatchItem] = {}
    recipient_kinds: Dict[str, Set[BatchItemType]] = {}

    for item in items:
        recipient = _address_key(item.recipient_address)
        kinds = recipient_kinds.setdefault(recipient, set())

        if item.type == BatchItemType.TON:
            key = f"ton:{recipient}"
        else:
            if kinds & _EXCLUSIVE_KINDS:
                logger.debug(f"Dropping {item.type.value} transfer to {item.recipient_address}: recipient already served")
                continue
            if item.type == BatchItemType.TOKEN:
                key = f"token:{_address_key(item.jetton_master_address)}"
            else:
                key = f"nft:{_address_key(item.token_id)}"

        if key in kept:
            logger.debug(f"Dropping duplicate transfer {key}")
            continue

        kept[key] = item
        kinds.add(item.type)

    return list(kept.values())
