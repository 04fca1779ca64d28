"""
Collaborator interfaces and implementations

- base: PoolViewer / VenuePool / PriceOracle interfaces
- memory: in-process venue simulation and static oracles
- uniswap: on-chain pool viewer and TWAP oracle (web3)
- price_api: HTTP price oracle (httpx)
"""

from .base import PoolViewer, VenuePool, PriceOracle, VenuePosition
from .memory import InMemoryPool, StaticOracle, PoolTickOracle
from .uniswap import UniswapPoolViewer, UniswapTwapOracle, create_web3
from .price_api import PriceApiOracle

__all__ = [
    # Interfaces
    "PoolViewer",
    "VenuePool",
    "PriceOracle",
    "VenuePosition",
    # In-memory
    "InMemoryPool",
    "StaticOracle",
    "PoolTickOracle",
    # Uniswap
    "UniswapPoolViewer",
    "UniswapTwapOracle",
    "create_web3",
    # HTTP
    "PriceApiOracle",
]
