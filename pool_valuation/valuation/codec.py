"""
Compact encoding for batch results.

A generic ABI return of uint256[] starts with an offset word pointing at the
array. Callers of a valuation batch always know the shape, so the offset is
dropped: the payload is the length word followed by one word per value.
"""

from typing import List, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError

WORD_SIZE = 32
_OFFSET_WORD = (WORD_SIZE).to_bytes(WORD_SIZE, "big")


def encode_values(values: Sequence[int]) -> bytes:
    """Encode values as a length-prefixed array of uint256 words."""
    return encode(["uint256[]"], [list(values)])[WORD_SIZE:]


def decode_values(data: bytes) -> List[int]:
    """
    Decode a payload produced by encode_values.

    Raises:
        ValueError: If the payload is not a whole number of words or its
            length word disagrees with its size
    """
    data = bytes(data)
    if len(data) < WORD_SIZE or len(data) % WORD_SIZE:
        raise ValueError(f"Payload of {len(data)} bytes is not a length-prefixed word array")

    length = int.from_bytes(data[:WORD_SIZE], "big")
    if len(data) != WORD_SIZE * (length + 1):
        raise ValueError(
            f"Payload declares {length} values but carries {len(data) // WORD_SIZE - 1}"
        )

    try:
        (values,) = decode(["uint256[]"], _OFFSET_WORD + data)
    except DecodingError as e:
        raise ValueError(f"Failed to decode values: {e}")
    return list(values)
