"""
Chain state capability consumed by the valuation core.

The core never talks to an RPC endpoint directly. Everything it needs from
the ledger goes through a ChainStateProvider, so the same algorithm runs
against a live node (see pool_valuation.batchers.chain_state) or an in-memory
chain in tests.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class ChainStateProvider(ABC):
    """
    Read-only view of ledger state at a single snapshot.

    Implementations must answer every query against the same state so that
    one evaluation observes no interleaved mutations.
    """

    @abstractmethod
    def has_code(self, address: str) -> bool:
        """Return True if a contract is deployed at the address."""
        pass

    @abstractmethod
    def call(self, address: str, calldata: bytes) -> bytes:
        """
        Execute a read-only call and return the raw return data.

        Raises:
            CallFailedError: If the call reverts or cannot be executed
        """
        pass

    @abstractmethod
    def get_token_legs(self, pool: str) -> Tuple[str, str]:
        """Return the pool's (token0, token1) addresses."""
        pass

    @abstractmethod
    def get_reserves(self, pool: str) -> Tuple[int, int]:
        """Return the pool's raw (reserve0, reserve1)."""
        pass

    @abstractmethod
    def get_pair(self, registry: str, token_a: str, token_b: str) -> Optional[str]:
        """
        Look up the direct pair for two tokens on a pair registry (factory).

        Returns:
            Pair address, or None if the registry has no such pair
        """
        pass
