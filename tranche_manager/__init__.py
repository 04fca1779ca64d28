"""
Tranche Manager - two-tranche concentrated liquidity manager

Provides:
- Ratio-split deposits across two concentric ranges
- Proportional share issuance and withdrawal
- Cooldown-gated recentring on an oracle target tick

Collaborators:
- InMemoryPool / StaticOracle for simulation
- UniswapPoolViewer / UniswapTwapOracle (web3) for on-chain reads
- PriceApiOracle (httpx) for HTTP price feeds
"""

from .modules import TrancheManager, ManagerState, PositionManager, RebalanceScheduler, RebalancePhase
from .types import (
    Token,
    ManagerParams,
    PositionRecord,
    DepositResult,
    WithdrawResult,
    RebalanceResult,
    DepositEvent,
    WithdrawEvent,
    RebalanceEvent,
    NULL_ADDRESS,
    MAX_UINT128,
    compute_position_id,
)
from .errors import (
    TrancheManagerError,
    ValidationError,
    LiquidityOverflow,
    RebalanceCooldown,
    VenueError,
    OracleUnavailable,
    InsufficientFunds,
    PositionStateError,
    ConfigurationError,
    ErrorCode,
)
from .infra import ShareLedger, CorrelationContext
from .protocols import (
    PoolViewer,
    VenuePool,
    PriceOracle,
    InMemoryPool,
    StaticOracle,
    UniswapPoolViewer,
    UniswapTwapOracle,
    PriceApiOracle,
)
from .config import config, get_config, reload_config, setup_logging, enable_file_logging

__all__ = [
    # Manager
    "TrancheManager",
    "ManagerState",
    "PositionManager",
    "RebalanceScheduler",
    "RebalancePhase",
    # Types
    "Token",
    "ManagerParams",
    "PositionRecord",
    "DepositResult",
    "WithdrawResult",
    "RebalanceResult",
    "DepositEvent",
    "WithdrawEvent",
    "RebalanceEvent",
    "NULL_ADDRESS",
    "MAX_UINT128",
    "compute_position_id",
    # Errors
    "TrancheManagerError",
    "ValidationError",
    "LiquidityOverflow",
    "RebalanceCooldown",
    "VenueError",
    "OracleUnavailable",
    "InsufficientFunds",
    "PositionStateError",
    "ConfigurationError",
    "ErrorCode",
    # Infrastructure
    "ShareLedger",
    "CorrelationContext",
    # Collaborators
    "PoolViewer",
    "VenuePool",
    "PriceOracle",
    "InMemoryPool",
    "StaticOracle",
    "UniswapPoolViewer",
    "UniswapTwapOracle",
    "PriceApiOracle",
    # Config
    "config",
    "get_config",
    "reload_config",
    "setup_logging",
    "enable_file_logging",
]

__version__ = "0.1.0"
