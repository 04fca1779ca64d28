"""
Error definitions for the tranche manager
"""

from .exceptions import (
    ErrorCode,
    TrancheManagerError,
    ValidationError,
    LiquidityOverflow,
    RebalanceCooldown,
    VenueError,
    OracleUnavailable,
    InsufficientFunds,
    PositionStateError,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "TrancheManagerError",
    "ValidationError",
    "LiquidityOverflow",
    "RebalanceCooldown",
    "VenueError",
    "OracleUnavailable",
    "InsufficientFunds",
    "PositionStateError",
    "ConfigurationError",
]
