"""
Tests for the pool valuation command-line interface.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from pool_valuation.batchers import BatchError
from pool_valuation.cli import (
    build_parser,
    format_results,
    format_value,
    load_pool_addresses,
    main,
    parse_factory_range,
    run,
)
from pool_valuation.config import ConfigError

POOL_A = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"
POOL_B = "0xA478c2975Ab1Ea89e8196811F51A7B7Ade33eB11"


class TestLoadPoolAddresses:
    """Test pool address collection."""

    def test_pools_and_file_combined(self, tmp_path):
        """Test --pools come first, then file entries without comments."""
        pools_file = tmp_path / "pools.txt"
        pools_file.write_text(f"# USDC/WETH\n{POOL_B}  # DAI/WETH\n\n   \n")

        args = build_parser().parse_args(["--pools", POOL_A, "--pools-file", str(pools_file)])

        assert load_pool_addresses(args) == [POOL_A, POOL_B]

    def test_nothing_given(self):
        args = build_parser().parse_args([])
        assert load_pool_addresses(args) == []


@pytest.mark.parametrize("value,expected", [
    (0, "0.000000000000000000"),
    (1, "0.000000000000000001"),
    (10**18, "1.000000000000000000"),
    (2_000 * 10**18 + 5 * 10**17, "2000.500000000000000000"),
])
def test_format_value(value, expected):
    assert format_value(value) == expected


class TestFormatResults:
    """Test result rendering."""

    def test_text_marks_failures(self):
        output = format_results([POOL_A, POOL_B], {POOL_A.lower(): 10**18}, as_json=False)

        assert output.splitlines() == [
            f"{POOL_A} 1.000000000000000000",
            f"{POOL_B} failed",
        ]

    def test_json_uses_null_for_failures(self):
        output = format_results([POOL_A, POOL_B], {POOL_A.lower(): 0}, as_json=True)
        assert json.loads(output) == {POOL_A: 0, POOL_B: None}


class TestParser:
    """Test argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["--pools", POOL_A])

        assert args.chain == "ethereum"
        assert args.protocol is None
        assert args.block is None
        assert args.json is False

    def test_unsupported_chain_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--chain", "solana"])

    @pytest.mark.parametrize("value,expected", [
        ("0:500", (0, 500)),
        ("100:", (100, None)),
        (":50", (0, 50)),
        ("7", (7, None)),
    ])
    def test_factory_range(self, value, expected):
        assert parse_factory_range(value) == expected

    @pytest.mark.parametrize("value", ["a:b", "10:5", "1:2:3"])
    def test_bad_factory_range_rejected(self, value):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--factory-range", value])


class TestRun:
    """Test the async entry point with the batcher mocked out."""

    @pytest.mark.asyncio
    async def test_values_printed_in_order(self, capsys):
        """Test results follow input order and use configured addresses."""
        args = build_parser().parse_args(
            ["--pools", POOL_B, POOL_A, "--block", "19000000", "--batch-size", "25"]
        )

        with patch("pool_valuation.cli.ReferenceValueBatcher") as batcher_cls, \
                patch("pool_valuation.cli.Web3"):
            batcher_cls.return_value.fetch_values_chunked = AsyncMock(
                return_value={POOL_A.lower(): 3 * 10**18, POOL_B.lower(): 0}
            )
            exit_code = await run(args)

        assert exit_code == 0
        assert capsys.readouterr().out.splitlines() == [
            f"{POOL_B} 0.000000000000000000",
            f"{POOL_A} 3.000000000000000000",
        ]

        _, reference, pair_registry = batcher_cls.call_args.args
        assert reference == "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
        assert pair_registry == "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
        assert batcher_cls.call_args.kwargs["config"].batch_size == 25
        batcher_cls.return_value.fetch_values_chunked.assert_awaited_once_with(
            [POOL_B, POOL_A], 19_000_000
        )

    @pytest.mark.asyncio
    async def test_no_pools(self):
        args = build_parser().parse_args([])
        assert await run(args) == 1

    @pytest.mark.asyncio
    async def test_factory_range_appends_pairs(self, capsys):
        """Test enumerated pairs follow --pools and share one block."""
        args = build_parser().parse_args(["--pools", POOL_A, "--factory-range", "10:12"])

        with patch("pool_valuation.cli.ReferenceValueBatcher") as batcher_cls, \
                patch("pool_valuation.cli.Web3") as web3_cls, \
                patch(
                    "pool_valuation.cli.fetch_factory_pairs",
                    new=AsyncMock(return_value=[POOL_B]),
                ) as fetch_pairs:
            web3_cls.return_value.eth.block_number = 19_000_000
            batcher_cls.return_value.fetch_values_chunked = AsyncMock(
                return_value={POOL_A.lower(): 10**18, POOL_B.lower(): 2 * 10**18}
            )
            exit_code = await run(args)

        assert exit_code == 0
        fetch_pairs.assert_awaited_once_with(
            web3_cls.return_value,
            "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f",
            10,
            12,
            19_000_000,
        )
        batcher_cls.return_value.fetch_values_chunked.assert_awaited_once_with(
            [POOL_A, POOL_B], 19_000_000
        )
        assert capsys.readouterr().out.splitlines()[1] == f"{POOL_B} 2.000000000000000000"

    @pytest.mark.asyncio
    async def test_empty_factory_range(self):
        args = build_parser().parse_args(["--factory-range", "5:5", "--block", "1"])

        with patch("pool_valuation.cli.Web3"), \
                patch("pool_valuation.cli.fetch_factory_pairs", new=AsyncMock(return_value=[])):
            assert await run(args) == 1


class TestMain:
    """Test exit codes."""

    def test_config_error_exit_code(self):
        with patch("pool_valuation.cli.run", new=AsyncMock(side_effect=ConfigError("bad env"))):
            with pytest.raises(SystemExit) as exc_info:
                main(["--pools", POOL_A])
        assert exc_info.value.code == 1

    def test_chain_read_failure_exit_code(self):
        """Test an unreachable node exits cleanly instead of with a traceback."""
        error = BatchError("Could not resolve block 'latest': connection refused")
        with patch("pool_valuation.cli.run", new=AsyncMock(side_effect=error)):
            with pytest.raises(SystemExit) as exc_info:
                main(["--pools", POOL_A])
        assert exc_info.value.code == 1

    def test_bad_address_exit_code(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--pools", POOL_A, "--reference", "0x1234", "--rpc-url", "http://localhost:1"])
        assert exc_info.value.code == 2
