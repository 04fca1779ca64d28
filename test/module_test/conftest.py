"""
Shared configuration and fixtures for module integration tests.

The lifecycle tests run the manager end to end against the in-memory
venue. Tests that read a live Uniswap V3 pool are skipped unless an RPC
endpoint is configured.

Environment Variables:
    ETH_RPC_URL: Ethereum RPC endpoint URL (live read tests only)
"""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

# Load .env file
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from tranche_manager import InMemoryPool, ManagerParams, StaticOracle, Token, TrancheManager

# Uniswap V3 WETH/USDC 0.3% pool on Ethereum mainnet
UNISWAP_WETH_USDC_POOL = "0x8ad599c3A0ff1De082011EFDDc58f1908eb6e6D8"

WETH = Token(address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", symbol="WETH", decimals=18)

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
MANAGER = "0x" + "99" * 20


class Clock:
    """Settable unix time source"""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def skip_if_no_rpc_config():
    """Check if an RPC endpoint is configured, return skip message if not"""
    if not os.getenv("ETH_RPC_URL"):
        return "Missing ETH_RPC_URL environment variable"
    return None


# Pytest fixtures
@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def pool():
    """Venue at tick 0 with 60-tick spacing"""
    return InMemoryPool(tick_spacing=60, tick=0)


@pytest.fixture
def oracle():
    return StaticOracle(0)


@pytest.fixture
def params():
    return ManagerParams(
        name="Tranche LP",
        symbol="TLP",
        asset=WETH,
        threshold1=600,
        threshold2=1800,
        ratio1=70,
        ratio2=30,
        delay=3600,
        min_threshold=60,
        max_threshold=60_000,
    )


@pytest.fixture
def manager(params, pool, oracle, clock):
    """Manager wired to the in-memory venue and a static oracle"""
    return TrancheManager(params, pool, oracle, address=MANAGER, clock=clock)


@pytest.fixture(scope="module")
def live_viewer():
    """UniswapPoolViewer on the mainnet WETH/USDC pool"""
    skip_msg = skip_if_no_rpc_config()
    if skip_msg:
        pytest.skip(skip_msg)

    from tranche_manager.protocols.uniswap import UniswapPoolViewer

    return UniswapPoolViewer(UNISWAP_WETH_USDC_POOL)
