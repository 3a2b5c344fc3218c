"""
Pool valuation core.

Values Uniswap V2 style pools in units of a single reference asset using
direct-pair prices, 18-decimal normalization and 64.64 fixed-point math.
"""

from .codec import decode_values, encode_values
from .errors import (
    CallFailedError,
    DivisionConsistencyError,
    FixedPointOverflowError,
    ValuationError,
)
from .fixed_point import Q64, scaled_div, scaled_mul
from .normalizer import get_normalized_reserves, normalize_amount
from .orchestrator import evaluate_pools, evaluate_pools_encoded
from .price_cache import (
    PRICE_SENTINEL,
    PRICE_UNRESOLVED,
    PriceCache,
    ValuationContext,
    resolve_reference_value,
)
from .probe import probe_balance_of, probe_decimals
from .provider import ZERO_ADDRESS, ChainStateProvider

__all__ = [
    "ChainStateProvider",
    "ZERO_ADDRESS",
    "CallFailedError",
    "ValuationError",
    "FixedPointOverflowError",
    "DivisionConsistencyError",
    "Q64",
    "scaled_mul",
    "scaled_div",
    "probe_decimals",
    "probe_balance_of",
    "normalize_amount",
    "get_normalized_reserves",
    "PRICE_UNRESOLVED",
    "PRICE_SENTINEL",
    "PriceCache",
    "ValuationContext",
    "resolve_reference_value",
    "evaluate_pools",
    "evaluate_pools_encoded",
    "encode_values",
    "decode_values",
]
