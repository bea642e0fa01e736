"""Swap subsystem."""

from .models import SwapAsset, SwapAssetKind, SwapResult, SwapRouter
from .service import SWAP_KIND, SwapService

__all__ = [
    "SwapAsset",
    "SwapAssetKind",
    "SwapResult",
    "SwapRouter",
    "SWAP_KIND",
    "SwapService",
]
