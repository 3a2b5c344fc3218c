"""
Per-evaluation token price cache and direct-pair price resolution.

Prices are 64.64 fixed-point values of "reference units per normalized token
unit". The cache lives for exactly one evaluation: it is created by the
orchestrator, shared across every pool of that evaluation and then dropped.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

from .errors import CallFailedError
from .fixed_point import scaled_div, scaled_mul
from .normalizer import get_normalized_reserves
from .provider import ChainStateProvider

logger = logging.getLogger(__name__)

PRICE_UNRESOLVED = 0
PRICE_SENTINEL = 1  # resolved, but no direct pair against the reference


class PriceCache:
    """Token -> 64.64 price mapping for a single evaluation."""

    def __init__(self):
        self._prices: Dict[str, int] = {}

    @staticmethod
    def _key(token: str) -> str:
        return token.lower()

    def get(self, token: str) -> int:
        """Return the cached price, or PRICE_UNRESOLVED."""
        return self._prices.get(self._key(token), PRICE_UNRESOLVED)

    def is_unpriceable(self, token: str) -> bool:
        return self.get(token) == PRICE_SENTINEL

    def mark_unpriceable(self, token: str) -> None:
        self._prices[self._key(token)] = PRICE_SENTINEL

    def store(self, token: str, price: int) -> None:
        """Cache a computed price. A sentinel entry is never replaced."""
        key = self._key(token)
        if self._prices.get(key) == PRICE_SENTINEL:
            logger.debug(f"Ignoring price for {token}: already marked unpriceable")
            return
        self._prices[key] = price

    def __contains__(self, token: str) -> bool:
        return self._key(token) in self._prices

    def __len__(self) -> int:
        return len(self._prices)


@dataclass
class ValuationContext:
    """Everything one evaluation threads through the resolver."""

    provider: ChainStateProvider
    reference: str
    pair_registry: str
    cache: PriceCache = field(default_factory=PriceCache)


def _is_same_address(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def _resolve_price(context: ValuationContext, token: str) -> int:
    """Look up the token's direct pair and compute its price, updating the cache."""
    try:
        pair = context.provider.get_pair(context.pair_registry, token, context.reference)
    except CallFailedError as e:
        logger.debug(f"Pair lookup for {token} failed: {e}")
        pair = None

    if pair is None:
        context.cache.mark_unpriceable(token)
        return PRICE_SENTINEL

    # Pairs order their assets by numeric address
    if int(token, 16) < int(context.reference, 16):
        token_reserve, reference_reserve = get_normalized_reserves(
            context.provider, pair, token, context.reference
        )
    else:
        reference_reserve, token_reserve = get_normalized_reserves(
            context.provider, pair, context.reference, token
        )

    price = scaled_div(reference_reserve, token_reserve)
    context.cache.store(token, price)
    return price


def resolve_reference_value(context: ValuationContext, token: str, amount: int) -> int:
    """
    Value an 18-decimal token amount in reference-asset units.

    Args:
        context: Evaluation context holding the shared price cache
        token: Token address
        amount: Normalized token amount

    Returns:
        Reference-asset value, 0 when the token cannot be priced

    Raises:
        FixedPointOverflowError: If price x amount overflows
    """
    if _is_same_address(token, context.reference):
        return amount

    price = context.cache.get(token)
    if price == PRICE_SENTINEL:
        return 0

    if price == PRICE_UNRESOLVED:
        price = _resolve_price(context, token)
        if price == PRICE_SENTINEL:
            return 0

    return scaled_mul(price, amount)
