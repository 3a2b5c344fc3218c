"""Fixtures for valuation tests."""

import pytest

from .mock_chain import FACTORY, USDC, USDT, WETH, InMemoryChain, pool_address

USDC_WETH_PAIR = pool_address(0xA1)
USDT_WETH_PAIR = pool_address(0xA2)


@pytest.fixture
def chain():
    """Empty in-memory chain with WETH deployed."""
    chain = InMemoryChain()
    chain.add_token(WETH, 18)
    return chain


@pytest.fixture
def priced_chain(chain):
    """
    Chain with two direct pairs on the factory:

    - USDC/WETH: 2,000,000 USDC against 1,000 WETH (1 WETH = 2,000 USDC)
    - USDT/WETH: 3,000,000 USDT against 1,000 WETH (1 WETH = 3,000 USDT)
    """
    chain.add_token(USDC, 6)
    chain.add_token(USDT, 6)
    chain.add_pair(FACTORY, USDC_WETH_PAIR, USDC, 2_000_000 * 10**6, WETH, 1_000 * 10**18)
    chain.add_pair(FACTORY, USDT_WETH_PAIR, USDT, 3_000_000 * 10**6, WETH, 1_000 * 10**18)
    return chain
