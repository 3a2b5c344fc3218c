"""
Pair registries (V2 factories) used to find a token's direct pair against
the reference asset.

Only constant-product protocols whose factory answers getPair(tokenA, tokenB)
are listed.
"""

from dataclasses import dataclass
from typing import Dict, List

from .base import BaseConfig

# protocol -> chain -> factory address
PAIR_REGISTRIES: Dict[str, Dict[str, str]] = {
    "uniswap_v2": {
        "ethereum": "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f",
        "base": "0x8909Dc15e40173Ff4699343b6eB8132c65e18eC6",
        "arbitrum": "0xf1D7CC64Fb4452F05c498126312eBE29f30Fbcf9",
    },
    "sushiswap_v2": {
        "ethereum": "0xC0AEe478e3658e2610c5F7A4A2E1777cE9e4f2Ac",
        "arbitrum": "0xc35DADB65012eC5796536bD9864eD8773aBc74C4",
    },
}


@dataclass
class ProtocolConfig(BaseConfig):
    """Which factory prices tokens, per protocol and chain."""

    DEFAULT_PROTOCOL: str = BaseConfig.get_env("DEFAULT_PROTOCOL", "uniswap_v2")

    @property
    def supported_protocols(self) -> List[str]:
        return list(PAIR_REGISTRIES)

    def get_protocol_config(self, protocol: str, chain: str) -> Dict:
        """
        Deployment of a protocol on a chain; empty if it is not deployed there.

        Raises:
            ValueError: If the protocol is unknown
        """
        if protocol not in PAIR_REGISTRIES:
            raise ValueError(f"Unsupported protocol: {protocol}")

        registry = PAIR_REGISTRIES[protocol].get(chain)
        return {"pair_registry": registry} if registry else {}

    def get_pair_registry(self, protocol: str, chain: str) -> str:
        """Factory address of a protocol on a chain."""
        deployment = self.get_protocol_config(protocol, chain)
        if not deployment:
            raise ValueError(f"Protocol {protocol} is not deployed on {chain}")
        return deployment["pair_registry"]
