"""
In-memory liquidity venue

Deterministic simulation of a concentrated liquidity pool for running
the manager without a chain. Amount conversion uses the same integer
math as the on-chain venue: mint charges rounded-up amounts, burn
credits rounded-down amounts.
"""

import copy
import logging
from typing import Dict, Optional, Tuple

from ..base import PoolViewer, PriceOracle, VenuePool, VenuePosition
from ...errors import PositionStateError, VenueError, ValidationError
from ...math.tick_math import (
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    MIN_TICK,
    MAX_TICK,
    get_amounts_for_liquidity,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)
from ...types import MAX_UINT128, compute_position_id, normalize_address

logger = logging.getLogger(__name__)


class InMemoryPool(VenuePool):
    """
    Single-pool venue kept in process memory

    Usage:
        pool = InMemoryPool(tick_spacing=60, tick=0)
        amount0, amount1 = pool.mint(owner, -600, 600, 10**18)
        pool.set_tick(1200)
    """

    name = "memory"

    def __init__(
        self,
        tick_spacing: int = 60,
        tick: int = 0,
        sqrt_price_x96: Optional[int] = None,
    ):
        if tick_spacing <= 0:
            raise VenueError.invalid_state(f"tick spacing must be positive, got {tick_spacing}")

        self._tick_spacing = tick_spacing
        self._positions: Dict[str, VenuePosition] = {}
        self._ranges: Dict[str, Tuple[int, int]] = {}
        self._balance0 = 0
        self._balance1 = 0
        self._payouts: Dict[str, Tuple[int, int]] = {}

        # No liquidity yet, so the initial price moves no tokens
        self._sqrt_price_x96 = MIN_SQRT_RATIO
        self._tick = MIN_TICK
        if sqrt_price_x96 is not None:
            self.set_sqrt_price(sqrt_price_x96)
        else:
            self.set_tick(tick)

    def __repr__(self) -> str:
        return f"InMemoryPool(spacing={self._tick_spacing}, tick={self._tick})"

    # ========== Price ==========

    @property
    def tick_spacing(self) -> int:
        return self._tick_spacing

    def slot0(self) -> Tuple[int, int]:
        return self._sqrt_price_x96, self._tick

    def set_tick(self, tick: int) -> None:
        """Swap the pool price to exactly the given tick"""
        if tick < MIN_TICK or tick > MAX_TICK:
            raise VenueError.invalid_state(f"tick {tick} out of range")
        self._swap_to(get_sqrt_ratio_at_tick(tick), tick)

    def set_sqrt_price(self, sqrt_price_x96: int) -> None:
        """Swap the pool price to an arbitrary sqrt price"""
        if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
            raise VenueError.invalid_state(f"sqrt price {sqrt_price_x96} out of range")
        self._swap_to(sqrt_price_x96, get_tick_at_sqrt_ratio(sqrt_price_x96))

    def _swap_to(self, sqrt_price_x96: int, tick: int) -> None:
        # The swapper settles the change in every active range's reserves,
        # rounded up on both sides so the balances still cover a full burn
        delta0 = delta1 = 0
        for position_id, position in self._positions.items():
            if position.liquidity == 0:
                continue
            tick_lower, tick_upper = self._ranges[position_id]
            before0, before1 = self._amounts(tick_lower, tick_upper, position.liquidity, round_up=True)
            after0, after1 = self._amounts(
                tick_lower, tick_upper, position.liquidity, round_up=True, sqrt_price_x96=sqrt_price_x96
            )
            delta0 += after0 - before0
            delta1 += after1 - before1

        self._balance0 += delta0
        self._balance1 += delta1
        self._sqrt_price_x96 = sqrt_price_x96
        self._tick = tick
        logger.debug(f"swap to tick {tick}: pool balance delta ({delta0}, {delta1})")

    # ========== Liquidity ==========

    def _check_range(self, tick_lower: int, tick_upper: int) -> None:
        if tick_lower >= tick_upper:
            raise VenueError.invalid_state(f"tick_lower {tick_lower} >= tick_upper {tick_upper}")
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise VenueError.invalid_state(f"range [{tick_lower}, {tick_upper}] out of bounds")
        if tick_lower % self._tick_spacing or tick_upper % self._tick_spacing:
            raise VenueError.invalid_state(
                f"range [{tick_lower}, {tick_upper}] not aligned to spacing {self._tick_spacing}"
            )

    def _amounts(
        self,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
        round_up: bool,
        sqrt_price_x96: Optional[int] = None,
    ) -> Tuple[int, int]:
        return get_amounts_for_liquidity(
            self._sqrt_price_x96 if sqrt_price_x96 is None else sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_lower),
            get_sqrt_ratio_at_tick(tick_upper),
            liquidity,
            round_up=round_up,
        )

    def mint(self, owner: str, tick_lower: int, tick_upper: int, liquidity: int) -> Tuple[int, int]:
        if liquidity <= 0:
            raise ValidationError.zero_amount("liquidity")
        self._check_range(tick_lower, tick_upper)

        position_id = compute_position_id(owner, tick_lower, tick_upper)
        position = self._positions.setdefault(position_id, VenuePosition())
        self._ranges[position_id] = (tick_lower, tick_upper)
        if position.liquidity + liquidity > MAX_UINT128:
            raise VenueError.invalid_state(f"liquidity overflow on {position_id}")

        amount0, amount1 = self._amounts(tick_lower, tick_upper, liquidity, round_up=True)
        position.liquidity += liquidity
        self._balance0 += amount0
        self._balance1 += amount1

        logger.debug(f"mint {liquidity} at [{tick_lower}, {tick_upper}] -> ({amount0}, {amount1})")
        return amount0, amount1

    def burn(self, owner: str, tick_lower: int, tick_upper: int, liquidity: int) -> Tuple[int, int]:
        position_id = compute_position_id(owner, tick_lower, tick_upper)
        position = self._positions.get(position_id)
        if position is None:
            raise PositionStateError.not_found(position_id)
        if liquidity > position.liquidity:
            raise VenueError.invalid_state(
                f"burn of {liquidity} exceeds position liquidity {position.liquidity}"
            )

        amount0, amount1 = self._amounts(tick_lower, tick_upper, liquidity, round_up=False)
        position.liquidity -= liquidity
        position.tokens_owed0 += amount0
        position.tokens_owed1 += amount1

        logger.debug(f"burn {liquidity} at [{tick_lower}, {tick_upper}] -> ({amount0}, {amount1})")
        return amount0, amount1

    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int,
    ) -> Tuple[int, int]:
        position_id = compute_position_id(owner, tick_lower, tick_upper)
        position = self._positions.get(position_id)
        if position is None:
            raise PositionStateError.not_found(position_id)

        amount0 = min(amount0_requested, position.tokens_owed0)
        amount1 = min(amount1_requested, position.tokens_owed1)
        if amount0 > self._balance0 or amount1 > self._balance1:
            raise VenueError.invalid_state("pool balance below owed amounts")

        position.tokens_owed0 -= amount0
        position.tokens_owed1 -= amount1
        self._balance0 -= amount0
        self._balance1 -= amount1

        target = normalize_address(recipient)
        paid0, paid1 = self._payouts.get(target, (0, 0))
        self._payouts[target] = (paid0 + amount0, paid1 + amount1)
        return amount0, amount1

    def position(self, position_id: str) -> VenuePosition:
        position = self._positions.get(position_id)
        if position is None:
            raise PositionStateError.not_found(position_id)
        return copy.copy(position)

    def has_position(self, position_id: str) -> bool:
        return position_id in self._positions

    # ========== Simulation ==========

    def accrue_fees(self, owner: str, tick_lower: int, tick_upper: int, amount0: int, amount1: int) -> None:
        """Credit trading fees to a position, funded by new pool balance"""
        position_id = compute_position_id(owner, tick_lower, tick_upper)
        position = self._positions.get(position_id)
        if position is None:
            raise PositionStateError.not_found(position_id)
        position.tokens_owed0 += amount0
        position.tokens_owed1 += amount1
        self._balance0 += amount0
        self._balance1 += amount1

    def balances(self) -> Tuple[int, int]:
        """Tokens held by the pool"""
        return self._balance0, self._balance1

    def paid_to(self, recipient: str) -> Tuple[int, int]:
        """Total amounts collected to a recipient"""
        return self._payouts.get(normalize_address(recipient), (0, 0))

    # ========== Transactions ==========

    def checkpoint(self):
        return (
            copy.deepcopy(self._positions),
            dict(self._ranges),
            self._balance0,
            self._balance1,
            dict(self._payouts),
            self._tick,
            self._sqrt_price_x96,
        )

    def rollback(self, checkpoint) -> None:
        positions, ranges, balance0, balance1, payouts, tick, sqrt_price_x96 = checkpoint
        self._positions = copy.deepcopy(positions)
        self._ranges = dict(ranges)
        self._balance0 = balance0
        self._balance1 = balance1
        self._payouts = dict(payouts)
        self._tick = tick
        self._sqrt_price_x96 = sqrt_price_x96


class StaticOracle(PriceOracle):
    """Oracle reporting a settable tick"""

    name = "static"

    def __init__(self, tick: int = 0):
        self.tick = tick

    def target_tick(self) -> int:
        return self.tick

    def set_tick(self, tick: int) -> None:
        self.tick = tick


class PoolTickOracle(PriceOracle):
    """Oracle that targets a pool's current spot tick"""

    name = "spot"

    def __init__(self, viewer: PoolViewer):
        self._viewer = viewer

    def target_tick(self) -> int:
        return self._viewer.current_tick()
