"""Helpers for normalizing and comparing TON account addresses."""

from __future__ import annotations

import base64
import binascii
import re
from functools import lru_cache
from typing import Optional

_RAW_ADDRESS_RE = re.compile(r"^(-?\d+):([a-fA-F0-9]{64})$")
_FRIENDLY_LENGTH = 48

_BOC_MAGIC = bytes.fromhex("b5ee9c72")

# Tag byte of the user-friendly form
_BOUNCEABLE_TAG = 0x11
_NON_BOUNCEABLE_TAG = 0x51
_TEST_ONLY_FLAG = 0x80


def _crc16(data: bytes) -> int:
    """CRC16-XMODEM as used by the user-friendly address checksum."""
    crc = 0
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return crc


def _decode_friendly(address: str) -> bytes:
    padded = address.replace("-", "+").replace("_", "/")
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid TON address: {address}") from exc


@lru_cache(maxsize=1024)
def normalize_ton_address(address: str) -> str:
    """Collapse raw and user-friendly forms into the raw ``wc:hex`` form.

    Raises:
        ValueError: if the input is neither a raw address nor a
            user-friendly address with a valid checksum.
    """
    if not address:
        raise ValueError("Empty TON address")

    candidate = address.strip()
    match = _RAW_ADDRESS_RE.match(candidate)
    if match:
        workchain = int(match.group(1))
        return f"{workchain}:{match.group(2).lower()}"

    if len(candidate) != _FRIENDLY_LENGTH:
        raise ValueError(f"Invalid TON address: {address}")

    data = _decode_friendly(candidate)
    if len(data) != 36:
        raise ValueError(f"Invalid TON address: {address}")

    tag = data[0] & ~_TEST_ONLY_FLAG
    if tag not in (_BOUNCEABLE_TAG, _NON_BOUNCEABLE_TAG):
        raise ValueError(f"Invalid TON address tag: {address}")

    if _crc16(data[:34]) != int.from_bytes(data[34:], "big"):
        raise ValueError(f"Invalid TON address checksum: {address}")

    workchain = int.from_bytes(data[1:2], "big", signed=True)
    return f"{workchain}:{data[2:34].hex()}"


def is_valid_ton_address(address: Optional[str]) -> bool:
    if not address:
        return False
    try:
        normalize_ton_address(address)
    except ValueError:
        return False
    return True


def addresses_equal(left: str, right: str) -> bool:
    """Compare two addresses regardless of representation."""
    try:
        return normalize_ton_address(left) == normalize_ton_address(right)
    except ValueError:
        return False


def to_friendly_address(address: str, *, bounceable: bool = False, test_only: bool = False) -> str:
    """Render an address in the url-safe user-friendly form."""
    raw = normalize_ton_address(address)
    workchain_text, hash_hex = raw.split(":")
    tag = _BOUNCEABLE_TAG if bounceable else _NON_BOUNCEABLE_TAG
    if test_only:
        tag |= _TEST_ONLY_FLAG
    body = bytes([tag]) + int(workchain_text).to_bytes(1, "big", signed=True) + bytes.fromhex(hash_hex)
    payload = body + _crc16(body).to_bytes(2, "big")
    return base64.urlsafe_b64encode(payload).decode()


def address_from_boc(boc: str) -> Optional[str]:
    """Read an internal address from a single-cell BOC (hex or base64).

    Get-method stacks return addresses as slices wrapped in a BOC. Returns
    ``None`` for ``addr_none``.
    """
    try:
        data = bytes.fromhex(boc)
    except ValueError:
        data = base64.b64decode(boc)

    if data[:4] != _BOC_MAGIC:
        raise ValueError("Not a bag-of-cells payload")

    flags = data[4]
    has_index = bool(flags & 0x80)
    size = flags & 0x07
    offset_bytes = data[5]
    pos = 6

    cells = int.from_bytes(data[pos:pos + size], "big")
    pos += size
    roots = int.from_bytes(data[pos:pos + size], "big")
    pos += size * 2  # roots + absent
    pos += offset_bytes  # total cells size
    pos += roots * size  # root index list
    if has_index:
        pos += cells * offset_bytes

    if cells != 1:
        raise ValueError("Expected a single-cell BOC for an address slice")

    descriptor = data[pos + 1]
    pos += 2
    cell_data = data[pos:pos + (descriptor + 1) // 2]

    bits = int.from_bytes(cell_data, "big")
    total = len(cell_data) * 8

    def read(count: int) -> int:
        nonlocal total
        total -= count
        return (bits >> total) & ((1 << count) - 1)

    tag = read(2)
    if tag == 0b00:
        return None
    if tag != 0b10 or read(1) != 0:
        raise ValueError("Unsupported address encoding in slice")

    workchain = read(8)
    if workchain >= 0x80:
        workchain -= 0x100
    account = read(256)
    return f"{workchain}:{account:064x}"
