"""Tests for 18-decimal reserve normalization."""

import pytest

from pool_valuation.valuation.normalizer import get_normalized_reserves, normalize_amount

from .mock_chain import REVERT, TOKEN_X, USDC, WETH, pool_address


@pytest.mark.parametrize(
    "raw,decimals,expected",
    [
        (123, 18, 123),
        (1_000_000, 6, 10**18),
        (1, 1, 10**17),
        (5, 17, 50),
        (1_999, 21, 1),
        (10**24, 24, 10**18),
        (10**36 - 1, 36, 10**18 - 1),
        (5, 255, 0),
        (0, 6, 0),
    ],
)
def test_normalize_amount(raw, decimals, expected):
    assert normalize_amount(raw, decimals) == expected


@pytest.mark.parametrize("decimals", range(1, 256, 7))
def test_normalize_amount_scales_to_18_digits(decimals):
    raw = 10**decimals
    assert normalize_amount(raw, decimals) == 10**18


class TestGetNormalizedReserves:
    """Test cases for get_normalized_reserves."""

    def test_mixed_decimals(self, chain):
        pool = pool_address(0xC1)
        chain.add_token(USDC, 6)
        chain.add_pool(pool, USDC, WETH, 2_000_000 * 10**6, 1_000 * 10**18)

        assert get_normalized_reserves(chain, pool, USDC, WETH) == (
            2_000_000 * 10**18,
            1_000 * 10**18,
        )

    def test_legs_looked_up_when_omitted(self, chain):
        pool = pool_address(0xC1)
        chain.add_token(TOKEN_X, 24)
        chain.add_pool(pool, TOKEN_X, WETH, 5 * 10**24 + 999, 7)

        assert get_normalized_reserves(chain, pool) == (5 * 10**18, 7)

    def test_failed_decimals_yield_zero_pair(self, chain):
        pool = pool_address(0xC1)
        chain.add_token(TOKEN_X, REVERT)
        chain.add_pool(pool, TOKEN_X, WETH, 10**18, 10**18)

        assert get_normalized_reserves(chain, pool, TOKEN_X, WETH) == (0, 0)

    def test_zero_decimals_yield_zero_pair(self, chain):
        pool = pool_address(0xC1)
        chain.add_token(TOKEN_X, 18)
        chain.add_token(USDC, bytes(32))
        chain.add_pool(pool, TOKEN_X, USDC, 10**18, 10**6)

        assert get_normalized_reserves(chain, pool, TOKEN_X, USDC) == (0, 0)

    def test_unreadable_reserves_yield_zero_pair(self, chain):
        chain.add_token(USDC, 6)
        not_a_pool = pool_address(0xC2)

        assert get_normalized_reserves(chain, not_a_pool, USDC, WETH) == (0, 0)

    def test_unreadable_legs_yield_zero_pair(self, chain):
        assert get_normalized_reserves(chain, pool_address(0xC3)) == (0, 0)
