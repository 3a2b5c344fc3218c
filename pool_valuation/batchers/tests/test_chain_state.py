"""
Tests for the web3-backed chain state provider.
"""

from unittest.mock import MagicMock

import pytest
from eth_abi import encode
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3RPCError

from pool_valuation.valuation.errors import CallFailedError
from pool_valuation.valuation.provider import ZERO_ADDRESS
from pool_valuation.valuation.tests.mock_chain import FACTORY, USDC, WETH, pool_address

from ..chain_state import (
    GET_PAIR_SELECTOR,
    GET_RESERVES_SELECTOR,
    TOKEN0_SELECTOR,
    Web3ChainStateProvider,
    checksum_all,
)

POOL = pool_address(0xA1)


@pytest.fixture
def web3():
    return MagicMock()


@pytest.fixture
def provider(web3):
    return Web3ChainStateProvider(web3, 18_000_000)


class TestWeb3ChainStateProvider:
    """Test Web3ChainStateProvider against a mocked web3."""

    def test_has_code(self, web3, provider):
        """Test code presence is read at the pinned block."""
        web3.eth.get_code.return_value = b"\x60\x80"

        assert provider.has_code(POOL) is True
        web3.eth.get_code.assert_called_once_with(
            Web3.to_checksum_address(POOL), block_identifier=18_000_000
        )

    def test_has_no_code(self, web3, provider):
        """Test an empty account reports no code."""
        web3.eth.get_code.return_value = b""
        assert provider.has_code(POOL) is False

    def test_call_pins_block(self, web3, provider):
        """Test raw calls go to the checksummed address at the pinned block."""
        web3.eth.call.return_value = b"\x01" * 32

        assert provider.call(POOL, b"\xde\xad\xbe\xef") == b"\x01" * 32

        tx, = web3.eth.call.call_args.args
        assert tx == {"to": Web3.to_checksum_address(POOL), "data": b"\xde\xad\xbe\xef"}
        assert web3.eth.call.call_args.kwargs == {"block_identifier": 18_000_000}

    def test_revert_becomes_call_failed(self, web3, provider):
        """Test a contract revert is reported as a failed call."""
        web3.eth.call.side_effect = ContractLogicError("execution reverted")

        with pytest.raises(CallFailedError) as exc_info:
            provider.call(POOL, TOKEN0_SELECTOR)
        assert exc_info.value.address == POOL

    def test_rate_limit_propagates(self, web3, provider):
        """Test RPC throttling is not mistaken for a failed contract call."""
        web3.eth.call.side_effect = Web3RPCError(
            "{'code': -32005, 'message': 'rate limit exceeded'}"
        )

        with pytest.raises(Web3RPCError):
            provider.call(POOL, TOKEN0_SELECTOR)

    def test_rate_limit_on_pair_lookup_propagates(self, web3, provider):
        """Test a throttled getPair does not read as a missing pair."""
        web3.eth.call.side_effect = Web3RPCError("429 Too Many Requests")

        with pytest.raises(Web3RPCError):
            provider.get_pair(FACTORY, USDC, WETH)

    def test_transport_error_propagates(self, web3, provider):
        """Test connection failures are left for the batcher to retry."""
        web3.eth.call.side_effect = ConnectionError("connection reset by peer")

        with pytest.raises(ConnectionError):
            provider.call(POOL, TOKEN0_SELECTOR)

    def test_get_token_legs(self, web3, provider):
        """Test token0/token1 are decoded and checksummed."""
        web3.eth.call.side_effect = [
            encode(["address"], [USDC.lower()]),
            encode(["address"], [WETH.lower()]),
        ]

        assert provider.get_token_legs(POOL) == (USDC, WETH)

    def test_get_reserves(self, web3, provider):
        """Test getReserves drops the timestamp."""
        web3.eth.call.return_value = encode(
            ["uint112", "uint112", "uint32"], [2_000_000 * 10**6, 1_000 * 10**18, 1_700_000_000]
        )

        assert provider.get_reserves(POOL) == (2_000_000 * 10**6, 1_000 * 10**18)
        tx, = web3.eth.call.call_args.args
        assert tx["data"] == GET_RESERVES_SELECTOR

    def test_undecodable_response(self, web3, provider):
        """Test short return data is reported as a failed call."""
        web3.eth.call.return_value = b"\x01"

        with pytest.raises(CallFailedError):
            provider.get_reserves(POOL)

    def test_get_pair(self, web3, provider):
        """Test the factory is asked with both tokens encoded."""
        web3.eth.call.return_value = encode(["address"], [POOL])

        assert provider.get_pair(FACTORY, USDC, WETH) == Web3.to_checksum_address(POOL)

        tx, = web3.eth.call.call_args.args
        assert tx["to"] == FACTORY
        assert tx["data"] == GET_PAIR_SELECTOR + encode(["address", "address"], [USDC, WETH])

    def test_get_pair_missing(self, web3, provider):
        """Test the zero address means no pair."""
        web3.eth.call.return_value = encode(["address"], [ZERO_ADDRESS])
        assert provider.get_pair(FACTORY, USDC, WETH) is None


def test_checksum_all():
    assert checksum_all([USDC.lower(), WETH.lower()]) == [USDC, WETH]
    with pytest.raises(ValueError):
        checksum_all([USDC, "0x1234"])
