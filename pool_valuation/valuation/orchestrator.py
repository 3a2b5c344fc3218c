"""
Batch valuation of liquidity pools in reference-asset units.

One call to evaluate_pools is one atomic evaluation: it reads a single
snapshot through the provider, shares one price cache across all pools, and
either returns a value for every pool or raises.
"""

import logging
from typing import List, Sequence

from .codec import encode_values
from .errors import CallFailedError
from .normalizer import get_normalized_reserves
from .price_cache import ValuationContext, resolve_reference_value
from .provider import ChainStateProvider

logger = logging.getLogger(__name__)


def _evaluate_pool(context: ValuationContext, pool: str) -> int:
    provider = context.provider

    if not provider.has_code(pool):
        logger.debug(f"Pool {pool} has no code")
        return 0

    try:
        token0, token1 = provider.get_token_legs(pool)
    except CallFailedError as e:
        logger.debug(f"Pool {pool} did not return its tokens: {e}")
        return 0

    if not provider.has_code(token0) or not provider.has_code(token1):
        logger.debug(f"Pool {pool} has a token without code ({token0}, {token1})")
        return 0

    reserve0, reserve1 = get_normalized_reserves(provider, pool, token0, token1)

    value0 = resolve_reference_value(context, token0, reserve0)
    value1 = resolve_reference_value(context, token1, reserve1)

    # Any unpriceable leg zeroes the whole pool
    if value0 == 0 or value1 == 0:
        return 0

    # Both legs valued independently and summed
    return value0 + value1


def evaluate_pools(
    provider: ChainStateProvider,
    pools: Sequence[str],
    reference: str,
    pair_registry: str,
) -> List[int]:
    """
    Value each pool's reserves in units of the reference asset.

    Args:
        provider: Chain state provider answering from one snapshot
        pools: Pool addresses, in output order
        reference: Reference asset address (e.g. WETH)
        pair_registry: Factory used to find each token's direct pair

    Returns:
        One value per pool, in input order; 0 for pools that cannot be valued

    Raises:
        ValuationError: On fixed-point overflow; no partial result is returned
    """
    context = ValuationContext(
        provider=provider, reference=reference, pair_registry=pair_registry
    )

    values = [_evaluate_pool(context, pool) for pool in pools]

    logger.debug(
        f"Evaluated {len(values)} pools, {sum(1 for v in values if v)} priced, "
        f"{len(context.cache)} tokens cached"
    )
    return values


def evaluate_pools_encoded(
    provider: ChainStateProvider,
    pools: Sequence[str],
    reference: str,
    pair_registry: str,
) -> bytes:
    """evaluate_pools, returned in the compact codec format."""
    return encode_values(evaluate_pools(provider, pools, reference, pair_registry))
