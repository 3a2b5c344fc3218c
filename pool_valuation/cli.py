#!/usr/bin/env python3
"""
Command-line interface for pool valuation.

Usage:
    python -m pool_valuation.cli --chain ethereum --pools 0xB4e1...C9Dc 0xA478...3D11
    python -m pool_valuation.cli --chain ethereum --pools-file pools.txt --json
    python -m pool_valuation.cli --chain arbitrum --protocol sushiswap_v2 --block 150000000
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from web3 import Web3

from pool_valuation.batchers import (
    BatchConfig,
    BatchError,
    ReferenceValueBatcher,
    fetch_factory_pairs,
)
from pool_valuation.config import ConfigError, get_config

logger = logging.getLogger(__name__)

REFERENCE_DECIMALS = 18


def load_pool_addresses(args) -> List[str]:
    """Collect pool addresses from --pools and --pools-file, keeping order."""
    addresses = list(args.pools or [])

    if args.pools_file:
        for line in Path(args.pools_file).read_text().splitlines():
            line = line.split("#", 1)[0].strip()
            if line:
                addresses.append(line)

    return addresses


def parse_factory_range(value: str) -> Tuple[int, Optional[int]]:
    """Parse START:END (END optional) into a half-open index range."""
    start_text, _, end_text = value.partition(":")
    try:
        start = int(start_text) if start_text else 0
        end = int(end_text) if end_text else None
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid factory range {value!r}, expected START:END")

    if start < 0 or (end is not None and end < start):
        raise argparse.ArgumentTypeError(f"invalid factory range {value!r}")
    return start, end


def format_value(value: int) -> str:
    """Render an 18-decimal reference amount as a decimal string."""
    whole, fraction = divmod(value, 10**REFERENCE_DECIMALS)
    return f"{whole}.{fraction:0{REFERENCE_DECIMALS}d}"


def format_results(pools: List[str], values: Dict[str, int], as_json: bool) -> str:
    """Format valuation results in input order."""
    if as_json:
        return json.dumps(
            {pool: values.get(pool.lower()) for pool in pools}, indent=2
        )

    lines = []
    for pool in pools:
        value = values.get(pool.lower())
        lines.append(f"{pool} {'failed' if value is None else format_value(value)}")
    return "\n".join(lines)


async def run(args) -> int:
    """Value the requested pools and print the results."""
    config = get_config()
    settings = config.get_valuation_config(args.chain, args.protocol)

    rpc_url = args.rpc_url or settings["rpc_url"]
    reference = args.reference or settings["reference_asset"]
    pair_registry = args.pair_registry or settings["pair_registry"]

    pools = load_pool_addresses(args)
    if not pools and args.factory_range is None:
        logger.error("No pool addresses given")
        return 1

    web3 = Web3(Web3.HTTPProvider(rpc_url))
    block_identifier = args.block if args.block is not None else "latest"

    if args.factory_range is not None:
        start, end = args.factory_range
        if args.block is None:
            # Enumerate and value at the same block
            block_identifier = web3.eth.block_number
        factory_pools = await fetch_factory_pairs(
            web3, pair_registry, start, end, block_identifier
        )
        logger.info(f"Enumerated {len(factory_pools)} pairs from {pair_registry}")
        pools.extend(factory_pools)
        if not pools:
            logger.error("Factory range holds no pairs")
            return 1

    batch_config = BatchConfig(
        batch_size=args.batch_size or settings["batch_size"],
        max_retries=settings["max_retries"],
        retry_delay=settings["retry_delay"],
    )
    batcher = ReferenceValueBatcher(web3, reference, pair_registry, config=batch_config)

    logger.info(f"Valuing {len(pools)} pools on {args.chain} against {reference}")
    values = await batcher.fetch_values_chunked(pools, block_identifier)

    print(format_results(pools, values, args.json))

    failed = sum(1 for pool in pools if pool.lower() not in values)
    if failed:
        logger.warning(f"{failed}/{len(pools)} pools could not be valued")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Value liquidity pools in units of a reference asset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Value the USDC/WETH Uniswap V2 pair on Ethereum
  python -m pool_valuation.cli --chain ethereum --pools 0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc

  # Value pools listed in a file, output JSON
  python -m pool_valuation.cli --chain ethereum --pools-file pools.txt --json

  # Price against Sushiswap pairs at a fixed block
  python -m pool_valuation.cli --chain arbitrum --protocol sushiswap_v2 --block 150000000

  # Value the first 500 pairs the Uniswap V2 factory created
  python -m pool_valuation.cli --chain ethereum --factory-range 0:500
        """,
    )

    parser.add_argument(
        "--chain",
        choices=["ethereum", "base", "arbitrum"],
        default="ethereum",
        help="Chain to read from",
    )
    parser.add_argument("--pools", nargs="+", help="Pool addresses to value")
    parser.add_argument("--pools-file", help="File with one pool address per line")
    parser.add_argument(
        "--protocol",
        choices=["uniswap_v2", "sushiswap_v2"],
        help="Protocol whose factory provides direct pairs",
    )
    parser.add_argument(
        "--factory-range",
        type=parse_factory_range,
        metavar="START:END",
        help="Also value the pair registry's pairs allPairs[START:END] (END optional)",
    )
    parser.add_argument("--reference", help="Override the reference asset address")
    parser.add_argument("--pair-registry", help="Override the pair registry (factory) address")
    parser.add_argument("--rpc-url", help="Override the chain's RPC URL")
    parser.add_argument("--block", type=int, help="Block number to evaluate at")
    parser.add_argument("--batch-size", type=int, help="Pools per evaluation")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")

    return parser


def main(argv: List[str] = None):
    """Main CLI function."""
    args = build_parser().parse_args(argv)

    try:
        exit_code = asyncio.run(run(args))
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        exit_code = 1
    except BatchError as e:
        logger.error(f"Chain read failed: {e}")
        exit_code = 1
    except ValueError as e:
        logger.error(f"Invalid argument: {e}")
        exit_code = 2
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
