"""
Result and event type definitions for manager operations
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class DepositEvent:
    """Deposit(sender, recipient, amount)"""
    sender: str
    recipient: str
    amount: int
    name: str = field(default="Deposit", init=False)


@dataclass(frozen=True)
class WithdrawEvent:
    """Withdraw(sender, recipient, amount) where amount is the burned shares"""
    sender: str
    recipient: str
    amount: int
    name: str = field(default="Withdraw", init=False)


@dataclass(frozen=True)
class RebalanceEvent:
    """Rebalance(caller, timestamp)"""
    caller: Optional[str]
    timestamp: int
    name: str = field(default="Rebalance", init=False)


@dataclass
class DepositResult:
    """
    Deposit outcome

    Attributes:
        shares: Shares minted to the recipient
        liquidity: Liquidity supplied per tranche (tranche 0, tranche 1)
        amount0: Token0 paid into the venue
        amount1: Token1 paid into the venue
        unallocated: Part of the request lost to ratio floor division (never supplied)
    """
    shares: int
    liquidity: Tuple[int, int]
    amount0: int = 0
    amount1: int = 0
    unallocated: int = 0

    @property
    def total_liquidity(self) -> int:
        return self.liquidity[0] + self.liquidity[1]

    def __str__(self) -> str:
        return f"DepositResult(shares={self.shares}, liquidity={self.liquidity})"


@dataclass
class WithdrawResult:
    """
    Withdraw outcome

    Attributes:
        amount0: Token0 sent to the recipient (venue proceeds plus reserve share)
        amount1: Token1 sent to the recipient
        liquidity: Liquidity burned per tranche (tranche 0, tranche 1)
        shares: Shares burned
    """
    amount0: int
    amount1: int
    liquidity: Tuple[int, int]
    shares: int

    @property
    def amounts(self) -> Tuple[int, int]:
        return (self.amount0, self.amount1)

    def __iter__(self):
        # Allows `amount0, amount1 = manager.withdraw(...)`
        return iter((self.amount0, self.amount1))

    def __str__(self) -> str:
        return f"WithdrawResult(amount0={self.amount0}, amount1={self.amount1}, shares={self.shares})"


@dataclass
class RebalanceResult:
    """
    Rebalance outcome

    Attributes:
        target_tick: Oracle tick both tranches were recentred on
        timestamp: New last-rebalance time
        ranges: New (tick_lower, tick_upper) per tranche
        liquidity: New liquidity per tranche
        reserve0: Idle token0 kept by the manager after re-depositing
        reserve1: Idle token1 kept by the manager after re-depositing
    """
    target_tick: int
    timestamp: int
    ranges: Tuple[Tuple[int, int], Tuple[int, int]]
    liquidity: Tuple[int, int]
    reserve0: int = 0
    reserve1: int = 0

    def __str__(self) -> str:
        return f"RebalanceResult(target={self.target_tick}, ranges={self.ranges})"
