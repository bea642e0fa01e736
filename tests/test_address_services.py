import pytest

from ledger_agent.services.address import (
    address_from_boc,
    addresses_equal,
    is_valid_ton_address,
    normalize_ton_address,
    to_friendly_address,
)

HIPO_FRIENDLY = "kQAlDMBKCT8WJ4nwdwNRp0lvKMP4vUnHYspFPhEnyR36cg44"
HIPO_RAW = "0:250cc04a093f162789f0770351a7496f28c3f8bd49c762ca453e1127c91dfa72"


def test_normalize_friendly_address():
    assert normalize_ton_address(HIPO_FRIENDLY) == HIPO_RAW


def test_normalize_raw_address_lowercases():
    assert normalize_ton_address(HIPO_RAW.upper()) == HIPO_RAW
    assert normalize_ton_address("-1:" + "AB" * 32) == "-1:" + "ab" * 32


def test_friendly_round_trip():
    assert to_friendly_address(HIPO_RAW, bounceable=True, test_only=True) == HIPO_FRIENDLY


def test_bad_checksum_rejected():
    corrupted = HIPO_FRIENDLY[:-1] + ("5" if HIPO_FRIENDLY[-1] != "5" else "6")
    with pytest.raises(ValueError):
        normalize_ton_address(corrupted)


@pytest.mark.parametrize("value", ["", None, "0:abc", "not-an-address", "0x" + "ab" * 20])
def test_invalid_addresses(value):
    assert is_valid_ton_address(value) is False


def test_addresses_equal_across_forms():
    assert addresses_equal(HIPO_FRIENDLY, HIPO_RAW) is True
    assert addresses_equal(HIPO_FRIENDLY, "0:" + "00" * 32) is False
    assert addresses_equal("garbage", HIPO_RAW) is False


def test_address_from_boc():
    boc = "b5ee9c72" "01" "01" "01" "01" "00" "24" "00" "00" "43" "8002" + "22" * 31 + "30"
    assert address_from_boc(boc) == "0:" + "11" * 32


def test_address_from_boc_addr_none():
    assert address_from_boc("b5ee9c720101010100030000" "01" "20") is None


def test_address_from_boc_rejects_non_boc():
    with pytest.raises(ValueError):
        address_from_boc("deadbeef")
