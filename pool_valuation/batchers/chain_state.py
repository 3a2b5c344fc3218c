"""
Web3-backed chain state provider.

Answers the valuation core's ledger queries with eth_call / eth_getCode,
all pinned to one block so an evaluation reads a consistent snapshot.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..valuation.errors import CallFailedError
from ..valuation.provider import ZERO_ADDRESS, ChainStateProvider

logger = logging.getLogger(__name__)

TOKEN0_SELECTOR = function_signature_to_4byte_selector("token0()")
TOKEN1_SELECTOR = function_signature_to_4byte_selector("token1()")
GET_RESERVES_SELECTOR = function_signature_to_4byte_selector("getReserves()")
GET_PAIR_SELECTOR = function_signature_to_4byte_selector("getPair(address,address)")


class Web3ChainStateProvider(ChainStateProvider):
    """
    ChainStateProvider over a web3 connection.

    Contract reverts and undecodable return data become CallFailedError.
    Every other RPC failure (throttling, timeouts, dropped connections)
    propagates so the batcher retries the whole evaluation.
    """

    def __init__(self, web3: Web3, block_identifier: Union[int, str] = "latest"):
        """
        Initialize the provider.

        Args:
            web3: Web3 instance
            block_identifier: Block every query is answered at
        """
        self.web3 = web3
        self.block_identifier = block_identifier

    def has_code(self, address: str) -> bool:
        code = self.web3.eth.get_code(
            Web3.to_checksum_address(address), block_identifier=self.block_identifier
        )
        return len(code) > 0

    def call(self, address: str, calldata: bytes) -> bytes:
        try:
            return bytes(
                self.web3.eth.call(
                    {"to": Web3.to_checksum_address(address), "data": calldata},
                    block_identifier=self.block_identifier,
                )
            )
        except (ContractLogicError, BadFunctionCallOutput) as e:
            raise CallFailedError(f"Call to {address} failed: {e}", address=address)

    def _call_and_decode(self, address: str, calldata: bytes, types: Sequence[str]) -> Tuple:
        data = self.call(address, calldata)
        try:
            return decode(list(types), data)
        except DecodingError as e:
            raise CallFailedError(
                f"Undecodable response from {address}: {e}", address=address
            )

    def get_token_legs(self, pool: str) -> Tuple[str, str]:
        (token0,) = self._call_and_decode(pool, TOKEN0_SELECTOR, ["address"])
        (token1,) = self._call_and_decode(pool, TOKEN1_SELECTOR, ["address"])
        return Web3.to_checksum_address(token0), Web3.to_checksum_address(token1)

    def get_reserves(self, pool: str) -> Tuple[int, int]:
        reserve0, reserve1, _ = self._call_and_decode(
            pool, GET_RESERVES_SELECTOR, ["uint112", "uint112", "uint32"]
        )
        return reserve0, reserve1

    def get_pair(self, registry: str, token_a: str, token_b: str) -> Optional[str]:
        calldata = GET_PAIR_SELECTOR + encode(
            ["address", "address"],
            [Web3.to_checksum_address(token_a), Web3.to_checksum_address(token_b)],
        )
        (pair,) = self._call_and_decode(registry, calldata, ["address"])
        if pair.lower() == ZERO_ADDRESS:
            return None
        return Web3.to_checksum_address(pair)


def checksum_all(addresses: Sequence[str]) -> List[str]:
    """Checksum a list of addresses, raising ValueError on the first bad one."""
    return [Web3.to_checksum_address(address) for address in addresses]
