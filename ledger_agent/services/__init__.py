"""Service layer helpers"""

from .address import (
    address_from_boc,
    addresses_equal,
    is_valid_ton_address,
    normalize_ton_address,
    to_friendly_address,
)

__all__ = [
    "address_from_boc",
    "addresses_equal",
    "is_valid_ton_address",
    "normalize_ton_address",
    "to_friendly_address",
]
