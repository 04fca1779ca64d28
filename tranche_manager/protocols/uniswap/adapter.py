"""
Uniswap V3 on-chain collaborators

- UniswapPoolViewer: reads slot0/tickSpacing from a pool contract
- UniswapTwapOracle: arithmetic-mean tick over a window from observe()

Both are read-only; neither signs nor submits transactions.
"""

import logging
from typing import Optional, Tuple

from web3 import Web3, HTTPProvider

from .api import V3_POOL_ABI
from ..base import PoolViewer, PriceOracle
from ...config import UniswapConfig, config as global_config
from ...errors import ConfigurationError, OracleUnavailable, VenueError

logger = logging.getLogger(__name__)


def create_web3(rpc_url: str, timeout: float = 30) -> Web3:
    """
    Create Web3 instance for an RPC endpoint

    Args:
        rpc_url: RPC endpoint URL
        timeout: Request timeout in seconds

    Returns:
        Configured Web3 instance
    """
    if not rpc_url:
        raise ConfigurationError.missing("ETH_RPC_URL")

    provider = HTTPProvider(
        rpc_url,
        request_kwargs={"timeout": timeout},
    )
    return Web3(provider)


def _resolve_web3(web3: Optional[Web3], uniswap_config: Optional[UniswapConfig]) -> Web3:
    if web3 is not None:
        return web3
    cfg = uniswap_config or global_config.uniswap
    return create_web3(cfg.eth_rpc_url, cfg.timeout)


class UniswapPoolViewer(PoolViewer):
    """
    Read-only view of a Uniswap V3 pool

    Usage:
        viewer = UniswapPoolViewer("0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640")
        sqrt_price_x96, tick = viewer.slot0()
    """

    name = "uniswap"

    def __init__(
        self,
        pool_address: str,
        web3: Optional[Web3] = None,
        uniswap_config: Optional[UniswapConfig] = None,
    ):
        self._web3 = _resolve_web3(web3, uniswap_config)
        self._pool_address = Web3.to_checksum_address(pool_address)
        self._contract = self._web3.eth.contract(
            address=self._pool_address,
            abi=V3_POOL_ABI,
        )
        self._tick_spacing: Optional[int] = None

    @property
    def pool_address(self) -> str:
        return self._pool_address

    def slot0(self) -> Tuple[int, int]:
        try:
            slot0 = self._contract.functions.slot0().call()
        except Exception as e:
            raise VenueError.call_failed("slot0", e) from e

        sqrt_price_x96 = slot0[0]
        tick = slot0[1]
        if sqrt_price_x96 == 0:
            raise VenueError.invalid_state(f"pool {self._pool_address} is not initialized")
        return sqrt_price_x96, tick

    @property
    def tick_spacing(self) -> int:
        # Immutable on-chain, read once
        if self._tick_spacing is None:
            try:
                self._tick_spacing = self._contract.functions.tickSpacing().call()
            except Exception as e:
                raise VenueError.call_failed("tickSpacing", e) from e
        return self._tick_spacing


class UniswapTwapOracle(PriceOracle):
    """
    Time-weighted average tick of a Uniswap V3 pool

    The mean tick is (cumulative_now - cumulative_then) / window, rounded
    toward negative infinity like the on-chain OracleLibrary.
    """

    name = "uniswap-twap"

    def __init__(
        self,
        pool_address: str,
        web3: Optional[Web3] = None,
        seconds: Optional[int] = None,
        uniswap_config: Optional[UniswapConfig] = None,
    ):
        cfg = uniswap_config or global_config.uniswap
        self._web3 = _resolve_web3(web3, cfg)
        self._pool_address = Web3.to_checksum_address(pool_address)
        self._contract = self._web3.eth.contract(
            address=self._pool_address,
            abi=V3_POOL_ABI,
        )
        self.seconds = seconds if seconds is not None else cfg.twap_seconds
        if self.seconds <= 0:
            raise ConfigurationError.invalid("twap_seconds", f"must be positive, got {self.seconds}")

    def target_tick(self) -> int:
        try:
            tick_cumulatives, _ = self._contract.functions.observe([self.seconds, 0]).call()
        except Exception as e:
            raise OracleUnavailable.unreachable(f"observe@{self._pool_address}", e) from e

        if len(tick_cumulatives) != 2:
            raise OracleUnavailable.invalid_response(
                self.name, f"expected 2 tick cumulatives, got {len(tick_cumulatives)}"
            )

        delta = tick_cumulatives[1] - tick_cumulatives[0]
        mean_tick = delta // self.seconds
        logger.debug(f"TWAP over {self.seconds}s for {self._pool_address}: tick {mean_tick}")
        return mean_tick
