"""
Collaborator interfaces

The manager talks to three collaborators through these interfaces:
- PoolViewer: read-only price and tick spacing of the venue pool
- VenuePool: the liquidity venue (mint/burn/collect at a tick range)
- PriceOracle: the target tick ranges are recentred on

Concrete implementations live in the protocol subpackages.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Tuple


@dataclass
class VenuePosition:
    """
    Venue-side state of one range

    Attributes:
        liquidity: Liquidity held in the range
        tokens_owed0: Token0 burned or earned but not yet collected
        tokens_owed1: Token1 burned or earned but not yet collected
    """
    liquidity: int = 0
    tokens_owed0: int = 0
    tokens_owed1: int = 0


class PoolViewer(ABC):
    """Read-only view of the venue pool"""

    name: str = "base"

    @abstractmethod
    def slot0(self) -> Tuple[int, int]:
        """
        Current pool price

        Returns:
            (sqrt_price_x96, tick)
        """
        ...

    @property
    @abstractmethod
    def tick_spacing(self) -> int:
        ...

    def sqrt_price_x96(self) -> int:
        return self.slot0()[0]

    def current_tick(self) -> int:
        return self.slot0()[1]


class VenuePool(PoolViewer):
    """
    Liquidity venue

    Positions are addressed by (owner, tick_lower, tick_upper). Burning
    liquidity credits the released amounts to the position's owed
    balances; `collect` pays owed balances out.
    """

    @abstractmethod
    def mint(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
    ) -> Tuple[int, int]:
        """
        Add liquidity to a range

        Args:
            owner: Position owner
            tick_lower: Lower tick
            tick_upper: Upper tick
            liquidity: Liquidity to add

        Returns:
            (amount0, amount1) paid into the venue
        """
        ...

    @abstractmethod
    def burn(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
    ) -> Tuple[int, int]:
        """
        Remove liquidity from a range

        Returns:
            (amount0, amount1) credited to the position's owed balances
        """
        ...

    @abstractmethod
    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int,
    ) -> Tuple[int, int]:
        """
        Pay out owed balances

        Returns:
            (amount0, amount1) actually paid, capped at what is owed
        """
        ...

    @abstractmethod
    def position(self, position_id: str) -> VenuePosition:
        """
        Venue state of a position

        Raises:
            PositionStateError: If the venue has no such position
        """
        ...

    @abstractmethod
    def checkpoint(self) -> Any:
        """Opaque marker of the current venue state"""
        ...

    @abstractmethod
    def rollback(self, checkpoint: Any) -> None:
        """Undo every venue effect since `checkpoint`"""
        ...


class PriceOracle(ABC):
    """Source of the target tick"""

    name: str = "base"

    @abstractmethod
    def target_tick(self) -> int:
        """
        Current target tick

        Raises:
            OracleUnavailable: If the source cannot answer
        """
        ...
