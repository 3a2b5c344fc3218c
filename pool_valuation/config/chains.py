"""
Per-chain settings: RPC endpoint, chain id and the reference asset values
are denominated in (the chain's wrapped native token).
"""

from dataclasses import dataclass
from typing import Dict

from .base import BaseConfig


@dataclass
class ChainConfig(BaseConfig):
    """RPC endpoints, reference assets and valuation batch settings."""

    DEFAULT_CHAIN: str = BaseConfig.get_env("DEFAULT_CHAIN", "ethereum")

    ETHEREUM_RPC_URL: str = BaseConfig.get_env("ETHEREUM_RPC_URL", "https://eth.llamarpc.com")
    BASE_RPC_URL: str = BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")
    ARBITRUM_RPC_URL: str = BaseConfig.get_env("ARBITRUM_RPC_URL", "https://arb1.arbitrum.io/rpc")

    # Wrapped native tokens
    ETHEREUM_WETH: str = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
    BASE_WETH: str = "0x4200000000000000000000000000000000000006"
    ARBITRUM_WETH: str = "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"

    VALUATION_BATCH_SIZE: int = BaseConfig.get_env_int("VALUATION_BATCH_SIZE", 100)
    MAX_RETRY_ATTEMPTS: int = BaseConfig.get_env_int("MAX_RETRY_ATTEMPTS", 3)
    RETRY_DELAY_SECONDS: float = BaseConfig.get_env_float("RETRY_DELAY_SECONDS", 1.0)

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Settings for every chain, keyed by chain name."""
        return {
            "ethereum": {
                "chain_id": 1,
                "rpc_url": self.ETHEREUM_RPC_URL,
                "reference_asset": self.ETHEREUM_WETH,
            },
            "base": {
                "chain_id": 8453,
                "rpc_url": self.BASE_RPC_URL,
                "reference_asset": self.BASE_WETH,
            },
            "arbitrum": {
                "chain_id": 42161,
                "rpc_url": self.ARBITRUM_RPC_URL,
                "reference_asset": self.ARBITRUM_WETH,
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """
        Settings for one chain.

        Raises:
            ValueError: If the chain is not configured
        """
        try:
            return self.supported_chains[chain_name]
        except KeyError:
            raise ValueError(
                f"Unsupported chain: {chain_name} (supported: {', '.join(self.supported_chains)})"
            )

    def get_rpc_url(self, chain_name: str) -> str:
        return self.get_chain_config(chain_name)["rpc_url"]

    def get_chain_id(self, chain_name: str) -> int:
        return self.get_chain_config(chain_name)["chain_id"]

    def get_reference_asset(self, chain_name: str) -> str:
        return self.get_chain_config(chain_name)["reference_asset"]
