"""
Pair enumeration for V2 factories.

A V2 factory keeps every pair it created in an array, exposed through
allPairsLength() and allPairs(index). This module reads a slice of that array
at one block so the pairs can be handed to ReferenceValueBatcher.
"""

from typing import Callable, List, Optional, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

from ..valuation.errors import CallFailedError
from ..valuation.provider import ChainStateProvider
from .base import BaseBatcher, BatchConfig, BatchResult
from .chain_state import Web3ChainStateProvider
from .errors import BatchError

ALL_PAIRS_LENGTH_SELECTOR = function_signature_to_4byte_selector("allPairsLength()")
ALL_PAIRS_SELECTOR = function_signature_to_4byte_selector("allPairs(uint256)")

ProviderFactory = Callable[[int], ChainStateProvider]


def _decode_single(provider: ChainStateProvider, address: str, calldata: bytes, abi_type: str):
    data = provider.call(address, calldata)
    try:
        (value,) = decode([abi_type], bytes(data))
    except DecodingError as e:
        raise CallFailedError(f"Undecodable response from {address}: {e}", address=address)
    return value


def get_all_pairs_length(provider: ChainStateProvider, registry: str) -> int:
    """Number of pairs the factory has created."""
    return _decode_single(provider, registry, ALL_PAIRS_LENGTH_SELECTOR, "uint256")


def get_pair_at(provider: ChainStateProvider, registry: str, index: int) -> str:
    """Checksummed address of the factory's pair at index."""
    calldata = ALL_PAIRS_SELECTOR + encode(["uint256"], [index])
    return Web3.to_checksum_address(_decode_single(provider, registry, calldata, "address"))


class FactoryPairsBatcher(BaseBatcher):
    """
    Reads a range of a factory's allPairs array, one chunk of indices per
    batch, every chunk at the same block.
    """

    def __init__(
        self,
        web3: Web3,
        registry: str,
        config: Optional[BatchConfig] = None,
        provider_factory: Optional[ProviderFactory] = None,
    ):
        """
        Args:
            web3: Web3 instance
            registry: Factory address
            config: Batch configuration (batch_size is indices per batch)
            provider_factory: Builds a provider pinned to a block number
        """
        super().__init__(web3, config)
        self.registry = Web3.to_checksum_address(registry)
        self.provider_factory = provider_factory or (
            lambda block_number: Web3ChainStateProvider(self.web3, block_number)
        )

    async def batch_call(
        self,
        indices: List[int],
        block_identifier: Union[int, str] = 'latest'
    ) -> BatchResult:
        """
        Read the pairs at the given indices.

        Returns:
            BatchResult mapping lowercased pair address to its index
        """
        try:
            block_number = self._resolve_block(block_identifier)

            async def _read_pairs():
                provider = self.provider_factory(block_number)
                return [get_pair_at(provider, self.registry, index) for index in indices]

            pairs = await self._retry_operation(_read_pairs)

            return BatchResult(
                success=True,
                data={pair.lower(): index for pair, index in zip(pairs, indices)},
                block_number=block_number,
            )

        except Exception as e:
            self.logger.error(f"Reading pairs {indices[:1]}..{indices[-1:]} failed: {e}")
            return BatchResult(success=False, data={}, error=str(e))

    async def fetch_pairs_chunked(
        self,
        start: int = 0,
        end: Optional[int] = None,
        block_identifier: Union[int, str] = 'latest'
    ) -> List[str]:
        """
        Read allPairs[start:end] in index order.

        end defaults to (and is clamped at) allPairsLength().

        Raises:
            ValueError: If start is negative
            BatchError: If the length or any chunk cannot be read; a partial
                pair list is never returned
        """
        if start < 0:
            raise ValueError(f"start must not be negative, got {start}")

        block_number = self._resolve_block(block_identifier)

        async def _read_length():
            return get_all_pairs_length(self.provider_factory(block_number), self.registry)

        try:
            total = await self._retry_operation(_read_length)
        except Exception as e:
            raise BatchError(f"Could not read allPairsLength of {self.registry}: {e}")

        end = total if end is None else min(end, total)
        indices = list(range(start, end))
        self.logger.info(
            f"Reading {len(indices)} of {total} pairs from {self.registry} at block {block_number}"
        )

        pairs = []
        for chunk in self._chunk_addresses(indices):
            result = await self.batch_call(chunk, block_number)
            if not result.success:
                raise BatchError(f"Pairs {chunk[0]}..{chunk[-1]} could not be read: {result.error}")
            pairs.extend(sorted(result.data, key=result.data.get))

        return [Web3.to_checksum_address(pair) for pair in pairs]


async def fetch_factory_pairs(
    web3: Web3,
    registry: str,
    start: int = 0,
    end: Optional[int] = None,
    block_identifier: Union[int, str] = 'latest',
    batch_size: int = 766
) -> List[str]:
    """
    Convenience function to list a factory's pairs.

    Args:
        web3: Web3 instance
        registry: Factory address
        start: First index
        end: One past the last index (defaults to allPairsLength())
        block_identifier: Block to read at
        batch_size: Indices per batch

    Returns:
        Checksummed pair addresses in index order
    """
    batcher = FactoryPairsBatcher(web3, registry, config=BatchConfig(batch_size=batch_size))
    return await batcher.fetch_pairs_chunked(start, end, block_identifier)
