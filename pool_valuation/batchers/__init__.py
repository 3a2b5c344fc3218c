"""
Blockchain batch valuation utilities.

This package runs the valuation core against live chain state, batching
pools per evaluation to reduce RPC overhead.
"""

from .base import BaseBatcher, BatchResult, BatchConfig
from .chain_state import Web3ChainStateProvider
from .errors import BatchError, ErrorHandler, NetworkError, RateLimitError, ValidationError
from .factory_pairs import FactoryPairsBatcher, fetch_factory_pairs
from .reference_value import ReferenceValueBatcher, fetch_reference_values

__all__ = [
    'BaseBatcher',
    'BatchResult',
    'BatchConfig',
    'BatchError',
    'ErrorHandler',
    'NetworkError',
    'RateLimitError',
    'ValidationError',
    'Web3ChainStateProvider',
    'ReferenceValueBatcher',
    'fetch_reference_values',
    'FactoryPairsBatcher',
    'fetch_factory_pairs'
]
