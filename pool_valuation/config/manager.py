"""
Single entry point to every config section.

    config = get_config()
    settings = config.get_valuation_config("ethereum")
"""

import logging
from typing import Any, Dict, Optional

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .protocols import ProtocolConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Holds the base, chain and protocol sections of one configuration."""

    def __init__(self, environment: Optional[str] = None):
        """
        Args:
            environment: Overrides ENVIRONMENT (local, dev, staging, production)
        """
        try:
            self._base_config = BaseConfig()
            if environment:
                self._base_config.ENVIRONMENT = environment
                self._base_config._validate_config()

            self._chain_config = ChainConfig()
            self._protocol_config = ProtocolConfig()
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}")

        logger.info(f"Configuration loaded for environment: {self.environment}")

    @property
    def environment(self) -> str:
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        return self._base_config

    @property
    def chains(self) -> ChainConfig:
        return self._chain_config

    @property
    def protocols(self) -> ProtocolConfig:
        return self._protocol_config

    def get_valuation_config(self, chain: str, protocol: Optional[str] = None) -> Dict[str, Any]:
        """
        Everything a valuation run on one chain needs.

        Args:
            chain: Chain name
            protocol: Protocol whose factory prices tokens (DEFAULT_PROTOCOL if omitted)

        Returns:
            Dict with chain, chain_id, rpc_url, protocol, reference_asset,
            pair_registry, batch_size, max_retries and retry_delay

        Raises:
            ValueError: For an unknown chain or protocol, or a protocol not
                deployed on the chain
        """
        protocol = protocol or self.protocols.DEFAULT_PROTOCOL
        chain_settings = self.chains.get_chain_config(chain)

        return {
            "chain": chain,
            "chain_id": chain_settings["chain_id"],
            "rpc_url": chain_settings["rpc_url"],
            "protocol": protocol,
            "reference_asset": chain_settings["reference_asset"],
            "pair_registry": self.protocols.get_pair_registry(protocol, chain),
            "batch_size": self.chains.VALUATION_BATCH_SIZE,
            "max_retries": self.chains.MAX_RETRY_ATTEMPTS,
            "retry_delay": self.chains.RETRY_DELAY_SECONDS,
        }

    def validate_configuration(self) -> bool:
        """
        Check cross-section consistency.

        Raises:
            ConfigError: On the first problem found
        """
        for name in ("VALUATION_BATCH_SIZE", "MAX_RETRY_ATTEMPTS"):
            value = getattr(self.chains, name)
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")

        if self.chains.RETRY_DELAY_SECONDS < 0:
            raise ConfigError(
                f"RETRY_DELAY_SECONDS must not be negative, got {self.chains.RETRY_DELAY_SECONDS}"
            )

        if self.chains.DEFAULT_CHAIN not in self.chains.supported_chains:
            raise ConfigError(f"Unsupported default chain: {self.chains.DEFAULT_CHAIN}")

        if self.protocols.DEFAULT_PROTOCOL not in self.protocols.supported_protocols:
            raise ConfigError(f"Unsupported default protocol: {self.protocols.DEFAULT_PROTOCOL}")

        deployed = [
            chain
            for chain in self.chains.supported_chains
            if self.protocols.get_protocol_config(self.protocols.DEFAULT_PROTOCOL, chain)
        ]
        logger.debug(f"{self.protocols.DEFAULT_PROTOCOL} deployed on: {', '.join(deployed)}")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "base": self.base.to_dict(),
            "chains": self.chains.to_dict(),
            "protocols": self.protocols.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment})"


_config_manager: Optional[ConfigManager] = None


def get_config(environment: Optional[str] = None, force_reload: bool = False) -> ConfigManager:
    """Return the process-wide ConfigManager, building and validating it on first use."""
    global _config_manager

    if _config_manager is None or force_reload:
        manager = ConfigManager(environment=environment)
        manager.validate_configuration()
        _config_manager = manager

    return _config_manager


def reload_config(environment: Optional[str] = None) -> ConfigManager:
    """Rebuild the process-wide ConfigManager, e.g. after changing the environment."""
    return get_config(environment=environment, force_reload=True)
