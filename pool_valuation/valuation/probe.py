"""
ERC20 metadata probes.

Arbitrary tokens may revert or return malformed data from decimals(). These
helpers never raise on a failed call; they report a (value, success) pair and
let the caller decide what a failure means.
"""

import logging
from typing import Tuple

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from .errors import CallFailedError
from .provider import ChainStateProvider

logger = logging.getLogger(__name__)

DECIMALS_SELECTOR = function_signature_to_4byte_selector("decimals()")
BALANCE_OF_SELECTOR = function_signature_to_4byte_selector("balanceOf(address)")

WORD_SIZE = 32
MAX_DECIMALS = 255


def _probe_uint(provider: ChainStateProvider, address: str, calldata: bytes) -> Tuple[int, bool]:
    """Call address and decode exactly one uint256 word from the response."""
    try:
        data = provider.call(address, calldata)
    except CallFailedError as e:
        logger.debug(f"Probe call to {address} failed: {e}")
        return 0, False

    if data is None or len(data) != WORD_SIZE:
        logger.debug(
            f"Probe call to {address} returned {0 if data is None else len(data)} bytes, expected {WORD_SIZE}"
        )
        return 0, False

    (value,) = decode(["uint256"], bytes(data))
    return value, True


def probe_decimals(provider: ChainStateProvider, token: str) -> Tuple[int, bool]:
    """
    Query a token's decimals() without raising.

    Args:
        provider: Chain state provider
        token: Token address

    Returns:
        (decimals, success). A response of 0 or above 255 counts as failure.
    """
    decimals, success = _probe_uint(provider, token, DECIMALS_SELECTOR)
    if not success:
        return 0, False

    if decimals == 0 or decimals > MAX_DECIMALS:
        logger.debug(f"Token {token} reported invalid decimals: {decimals}")
        return 0, False

    return decimals, True


def probe_balance_of(provider: ChainStateProvider, token: str, owner: str) -> Tuple[int, bool]:
    """
    Query token.balanceOf(owner) without raising.

    Returns:
        (balance, success)
    """
    try:
        calldata = BALANCE_OF_SELECTOR + encode(["address"], [to_checksum_address(owner)])
    except (ValueError, TypeError) as e:
        logger.debug(f"Invalid balance owner {owner}: {e}")
        return 0, False

    return _probe_uint(provider, token, calldata)
