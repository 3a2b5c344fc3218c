"""
Environment-driven settings shared by every config section.

Values come from the process environment, after a .env file (if any) has
been loaded into it by python-dotenv.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Optional, TypeVar

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("local", "dev", "staging", "production")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

T = TypeVar("T")


class ConfigError(Exception):
    """Raised for missing or malformed settings."""
    pass


def _typed_env(key: str, default: Optional[T], required: bool, cast: Callable[[str], T], kind: str) -> T:
    raw = os.getenv(key)
    if raw is None:
        if required:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"Environment variable '{key}' must be {kind}, got: {raw}")


@dataclass
class BaseConfig:
    """Deployment environment and logging level."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self):
        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ConfigError(f"Invalid log level: {self.LOG_LEVEL}")
        logging.basicConfig(level=level, format=LOG_FORMAT)

    def _validate_config(self):
        if self.ENVIRONMENT not in ENVIRONMENTS:
            raise ConfigError(
                f"Invalid environment: {self.ENVIRONMENT} (expected one of {', '.join(ENVIRONMENTS)})"
            )

    @staticmethod
    def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        Read a string setting.

        Raises:
            ConfigError: If required and unset
        """
        return _typed_env(key, default, required, str, "a string")

    @staticmethod
    def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
        return _typed_env(key, default, required, int, "an integer")

    @staticmethod
    def get_env_float(key: str, default: Optional[float] = None, required: bool = False) -> float:
        return _typed_env(key, default, required, float, "a float")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
