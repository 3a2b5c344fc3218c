"""
pool_valuation: value liquidity pools in units of a reference asset.

Example:
    from web3 import Web3
    from pool_valuation.batchers import fetch_reference_values

    web3 = Web3(Web3.HTTPProvider(rpc_url))
    values = await fetch_reference_values(web3, pools, weth, uniswap_v2_factory)
"""

__version__ = "0.1.0"
