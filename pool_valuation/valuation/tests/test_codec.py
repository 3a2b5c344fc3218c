"""Tests for the compact result encoding."""

import pytest
from eth_abi import encode

from pool_valuation.valuation.codec import decode_values, encode_values


def test_empty_batch_is_single_length_word():
    assert encode_values([]) == bytes(32)
    assert decode_values(bytes(32)) == []


def test_layout_is_length_then_values():
    encoded = encode_values([1, 2])

    assert len(encoded) == 96
    assert int.from_bytes(encoded[:32], "big") == 2
    assert int.from_bytes(encoded[32:64], "big") == 1
    assert int.from_bytes(encoded[64:], "big") == 2


def test_matches_abi_array_without_offset_word():
    values = [0, 10**18, 2**256 - 1]
    full = encode(["uint256[]"], [values])

    assert int.from_bytes(full[:32], "big") == 32
    assert encode_values(values) == full[32:]
    assert decode_values(encode_values(values)) == values


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        bytes(31),
        bytes(33),
        (2).to_bytes(32, "big") + bytes(32),
        (0).to_bytes(32, "big") + bytes(32),
    ],
)
def test_malformed_payload_rejected(payload):
    with pytest.raises(ValueError):
        decode_values(payload)
