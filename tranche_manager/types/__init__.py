"""
Type definitions for the tranche manager
"""

from .common import Token, NULL_ADDRESS, MAX_UINT128, is_null_address, normalize_address
from .position import PositionRecord, compute_position_id
from .params import ManagerParams
from .result import (
    DepositResult,
    WithdrawResult,
    RebalanceResult,
    DepositEvent,
    WithdrawEvent,
    RebalanceEvent,
)

__all__ = [
    # Common types
    "Token",
    "NULL_ADDRESS",
    "MAX_UINT128",
    "is_null_address",
    "normalize_address",
    # Positions
    "PositionRecord",
    "compute_position_id",
    "ManagerParams",
    # Results and events
    "DepositResult",
    "WithdrawResult",
    "RebalanceResult",
    "DepositEvent",
    "WithdrawEvent",
    "RebalanceEvent",
]
