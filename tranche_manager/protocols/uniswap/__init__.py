"""
Uniswap V3 read-only collaborators (web3)
"""

from .adapter import UniswapPoolViewer, UniswapTwapOracle, create_web3
from .api import V3_POOL_ABI, TICK_SPACING_BY_FEE

__all__ = [
    "UniswapPoolViewer",
    "UniswapTwapOracle",
    "create_web3",
    "V3_POOL_ABI",
    "TICK_SPACING_BY_FEE",
]
