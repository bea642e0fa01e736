"""Platform-specific pool strategies."""

from .hipo import HipoStrategy
from .ton_whales import TonWhalesStrategy

__all__ = ["HipoStrategy", "TonWhalesStrategy"]
