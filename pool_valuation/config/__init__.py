"""
Configuration management for pool_valuation.

Use get_config() to access all configuration settings.

Example:
    from pool_valuation.config import get_config

    config = get_config()

    # Access chain settings
    ethereum_rpc = config.chains.get_rpc_url("ethereum")
    weth = config.chains.get_reference_asset("ethereum")

    # Access pair registries
    factory = config.protocols.get_pair_registry("uniswap_v2", "ethereum")

    # Everything a valuation run needs
    settings = config.get_valuation_config("ethereum")
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager, get_config, reload_config
from .protocols import ProtocolConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ProtocolConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
