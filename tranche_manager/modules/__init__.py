"""
Manager modules

- PositionManager: single-range liquidity primitives
- RebalanceScheduler: cooldown gate and rebalance orchestration
- TrancheManager: two-tranche deposit/withdraw/rebalance policy
"""

from .position_manager import PositionManager, fundable_liquidity
from .scheduler import RebalanceScheduler, RebalancePhase
from .manager import TrancheManager, ManagerState, derive_manager_address

__all__ = [
    "PositionManager",
    "fundable_liquidity",
    "RebalanceScheduler",
    "RebalancePhase",
    "TrancheManager",
    "ManagerState",
    "derive_manager_address",
]
