"""
Shared plumbing for batched, block-pinned chain reads.

BaseBatcher owns the parts every batcher repeats: checksum validation of the
input addresses, splitting them into batches, turning a block tag into a
fixed block number, and retrying transient failures with backoff.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from web3 import Web3

from .errors import BatchError, ErrorHandler

logger = logging.getLogger(__name__)

BlockIdentifier = Union[int, str]


@dataclass
class BatchResult:
    """Outcome of one batch_call."""

    success: bool
    data: Dict[str, Any]
    block_number: Optional[int] = None
    timestamp: Optional[datetime] = None
    error: Optional[str] = None


@dataclass
class BatchConfig:
    """Batch sizing and retry budget."""

    batch_size: int = 100
    max_retries: int = 3
    retry_delay: float = 1.0  # scales the ErrorHandler backoff


class BaseBatcher(ABC):
    """
    Base class for batchers reading contract state through web3.

    Subclasses implement batch_call for one batch; chunking and retries are
    provided here.
    """

    def __init__(self, web3: Web3, config: Optional[BatchConfig] = None):
        self.web3 = web3
        self.config = config or BatchConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger)

    @abstractmethod
    async def batch_call(
        self, addresses: List[str], block_identifier: BlockIdentifier = "latest"
    ) -> BatchResult:
        """
        Process one batch of addresses at a block.

        Returns:
            BatchResult keyed by lowercased address
        """
        pass

    def _chunk_addresses(self, addresses: List[str]) -> List[List[str]]:
        size = self.config.batch_size
        return [addresses[start:start + size] for start in range(0, len(addresses), size)]

    async def _retry_operation(self, operation: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Await operation, retrying failures the ErrorHandler deems transient.

        The last error is re-raised once the retry budget is spent or the
        error is not retryable.
        """
        name = getattr(operation, "__name__", repr(operation))
        max_retries = self.config.max_retries

        for attempt in range(max_retries):
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                self.error_handler.log_error(
                    e, {"attempt": attempt + 1, "max_retries": max_retries, "operation": name}
                )

                if not self.error_handler.should_retry(e, attempt, max_retries):
                    self.logger.info(f"{name}: giving up on non-retryable error")
                    raise
                if attempt + 1 >= max_retries:
                    raise

                delay = self.error_handler.get_retry_delay(e, attempt) * self.config.retry_delay
                self.logger.info(f"{name}: attempt {attempt + 1}/{max_retries} failed, retrying in {delay}s")
                await asyncio.sleep(delay)

        raise BatchError(f"{name} was not attempted (max_retries={max_retries})")

    def _get_current_block(self) -> int:
        try:
            return self.web3.eth.block_number
        except Exception as e:
            self.logger.error(f"Could not read the current block number: {e}")
            raise BatchError(f"Could not read the current block number: {e}")

    def _resolve_block(self, block_identifier: BlockIdentifier) -> int:
        """Pin a block tag ('latest', 'safe', ...) to a concrete block number."""
        if isinstance(block_identifier, int):
            return block_identifier
        if block_identifier == "latest":
            return self._get_current_block()

        try:
            return self.web3.eth.get_block(block_identifier)["number"]
        except Exception as e:
            self.logger.error(f"Could not resolve block {block_identifier!r}: {e}")
            raise BatchError(f"Could not resolve block {block_identifier!r}: {e}")

    def _validate_addresses(self, addresses: List[str]) -> List[str]:
        """Checksum each address, dropping (and logging) the invalid ones."""
        valid = []
        for address in addresses:
            try:
                valid.append(Web3.to_checksum_address(address))
            except Exception as e:
                self.logger.warning(f"Skipping invalid address {address!r}: {e}")
        return valid
