"""
Reserve normalization to 18 fractional digits.
"""

import logging
from typing import Optional, Tuple

from .errors import CallFailedError
from .probe import probe_decimals
from .provider import ChainStateProvider

logger = logging.getLogger(__name__)

TARGET_DECIMALS = 18


def normalize_amount(raw: int, decimals: int) -> int:
    """
    Rescale a raw token amount to 18 decimals.

    Amounts of tokens with more than 18 decimals are truncated.
    """
    if decimals == TARGET_DECIMALS:
        return raw
    if decimals < TARGET_DECIMALS:
        return raw * 10 ** (TARGET_DECIMALS - decimals)
    return raw // 10 ** (decimals - TARGET_DECIMALS)


def get_normalized_reserves(
    provider: ChainStateProvider,
    pool: str,
    token0: Optional[str] = None,
    token1: Optional[str] = None,
) -> Tuple[int, int]:
    """
    Read a pool's reserves and rescale both to 18 decimals.

    Args:
        provider: Chain state provider
        pool: Pool address
        token0: Pool's token0, looked up when omitted
        token1: Pool's token1, looked up when omitted

    Returns:
        (reserve0, reserve1) at 18 decimals, or (0, 0) when either token's
        decimals or the reserves cannot be read
    """
    try:
        if token0 is None or token1 is None:
            token0, token1 = provider.get_token_legs(pool)
    except CallFailedError as e:
        logger.debug(f"Could not read token legs of {pool}: {e}")
        return 0, 0

    decimals0, ok0 = probe_decimals(provider, token0)
    decimals1, ok1 = probe_decimals(provider, token1)
    if not ok0 or not ok1:
        return 0, 0

    try:
        reserve0, reserve1 = provider.get_reserves(pool)
    except CallFailedError as e:
        logger.debug(f"Could not read reserves of {pool}: {e}")
        return 0, 0

    return normalize_amount(reserve0, decimals0), normalize_amount(reserve1, decimals1)
