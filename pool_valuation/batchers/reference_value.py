"""
Reference-asset value batch fetcher.

This module values many pools in units of a reference asset (WETH by
default) by running the valuation core against a block-pinned snapshot,
chunk by chunk.
"""

from typing import Callable, Dict, List, Optional, Union
from datetime import datetime, timezone

from web3 import Web3

from ..valuation.errors import ValuationError
from ..valuation.orchestrator import evaluate_pools
from ..valuation.provider import ChainStateProvider
from .base import BaseBatcher, BatchResult, BatchConfig
from .chain_state import Web3ChainStateProvider, checksum_all

ProviderFactory = Callable[[int], ChainStateProvider]


class ReferenceValueBatcher(BaseBatcher):
    """
    Batch fetcher for pool values in reference-asset units.

    Each batch is one atomic evaluation: every query is answered at the same
    block and prices are cached only for the duration of that batch.
    """

    def __init__(
        self,
        web3: Web3,
        reference: str,
        pair_registry: str,
        config: Optional[BatchConfig] = None,
        provider_factory: Optional[ProviderFactory] = None,
    ):
        """
        Initialize the reference value batcher.

        Args:
            web3: Web3 instance
            reference: Reference asset address (e.g. WETH)
            pair_registry: Factory used for direct-pair price lookups
            config: Batch configuration
            provider_factory: Builds a provider pinned to a block number
                (defaults to Web3ChainStateProvider)
        """
        super().__init__(web3, config)
        self.reference, self.pair_registry = checksum_all([reference, pair_registry])
        self.provider_factory = provider_factory or (
            lambda block_number: Web3ChainStateProvider(self.web3, block_number)
        )

    async def batch_call(
        self,
        pool_addresses: List[str],
        block_identifier: Union[int, str] = 'latest'
    ) -> BatchResult:
        """
        Value a batch of pools in one evaluation.

        Args:
            pool_addresses: List of pool contract addresses
            block_identifier: Block to evaluate at

        Returns:
            BatchResult mapping lowercased pool addresses to values
        """
        try:
            validated_addresses = self._validate_addresses(pool_addresses)
            if not validated_addresses:
                return BatchResult(
                    success=False,
                    data={},
                    error="No valid addresses provided"
                )

            block_number = self._resolve_block(block_identifier)

            async def _evaluate():
                provider = self.provider_factory(block_number)
                return evaluate_pools(
                    provider, validated_addresses, self.reference, self.pair_registry
                )

            values = await self._retry_operation(_evaluate)

            return BatchResult(
                success=True,
                data={
                    address.lower(): value
                    for address, value in zip(validated_addresses, values)
                },
                block_number=block_number,
                timestamp=datetime.now(timezone.utc)
            )

        except ValuationError as e:
            self.logger.warning(f"Valuation of {len(pool_addresses)} pools aborted: {e}")
            return BatchResult(success=False, data={}, error=str(e))
        except Exception as e:
            self.logger.error(f"Batch call failed: {e}")
            return BatchResult(
                success=False,
                data={},
                error=str(e)
            )

    async def fetch_values_chunked(
        self,
        pool_addresses: List[str],
        block_identifier: Union[int, str] = 'latest'
    ) -> Dict[str, int]:
        """
        Value a large number of pools using chunking.

        A failed chunk is retried one pool at a time so a single pool whose
        valuation overflows only costs its own entry.

        Args:
            pool_addresses: List of pool addresses (can be large)
            block_identifier: Block to evaluate at

        Returns:
            Combined mapping of lowercased pool address to value
        """
        all_values = {}
        chunks = self._chunk_addresses(pool_addresses)
        failed_addresses = []

        # Pin the block once so every chunk reads the same snapshot
        block_number = self._resolve_block(block_identifier)

        self.logger.info(
            f"Valuing {len(pool_addresses)} pools in {len(chunks)} chunks at block {block_number}"
        )

        for i, chunk in enumerate(chunks):
            self.logger.debug(f"Processing chunk {i + 1}/{len(chunks)} with {len(chunk)} pools")

            result = await self.batch_call(chunk, block_number)

            if result.success:
                all_values.update(result.data)
            else:
                self.logger.warning(f"Chunk {i + 1} failed: {result.error}")
                failed_addresses.extend(chunk)

        if failed_addresses and self.config.batch_size > 1:
            self.logger.info(f"Retrying {len(failed_addresses)} pools individually")

            for address in failed_addresses:
                result = await self.batch_call([address], block_number)

                if result.success:
                    all_values.update(result.data)
                else:
                    self.logger.warning(f"Pool {address} could not be valued: {result.error}")

        return all_values


# Convenience function for easy usage
async def fetch_reference_values(
    web3: Web3,
    pool_addresses: List[str],
    reference: str,
    pair_registry: str,
    block_identifier: Union[int, str] = 'latest',
    batch_size: int = 100
) -> Dict[str, int]:
    """
    Convenience function to value pools in reference-asset units.

    Args:
        web3: Web3 instance
        pool_addresses: List of pool contract addresses
        reference: Reference asset address
        pair_registry: Factory used for direct-pair price lookups
        block_identifier: Block to evaluate at
        batch_size: Number of pools per evaluation

    Returns:
        Dictionary mapping pool addresses to values (18 decimals of reference)
    """
    config = BatchConfig(batch_size=batch_size)
    batcher = ReferenceValueBatcher(web3, reference, pair_registry, config=config)
    return await batcher.fetch_values_chunked(pool_addresses, block_identifier)
