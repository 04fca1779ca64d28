"""
Single-Range Position Manager

Generic deposit/withdraw/recentre primitives over one venue range. The
two-tranche manager composes one of these per tranche.
"""

import logging
from typing import Any, Callable, Tuple

from ..errors import PositionStateError, TrancheManagerError, VenueError
from ..math.accounting import check_liquidity_ceiling
from ..math.tick_math import (
    amounts_from_liquidity,
    get_amounts_for_liquidity,
    get_sqrt_ratio_at_tick,
    liquidity_from_amounts,
)
from ..protocols.base import VenuePool
from ..types import MAX_UINT128, PositionRecord

logger = logging.getLogger(__name__)


class PositionManager:
    """
    Liquidity operations on one range owned by `owner`

    Provides:
    - supply: add liquidity at the record's current range
    - remove: burn liquidity and collect the principal to a recipient
    - close: burn everything and collect principal plus accrued fees
    - reopen: open a new range funded from a pair of token amounts

    Every venue failure is raised as VenueError; the caller's transaction
    rolls the venue back.

    Usage:
        tranche = PositionManager(pool, manager_address, label="tranche 0")
        amount0, amount1 = tranche.supply(record, 1000)
    """

    def __init__(self, venue: VenuePool, owner: str, label: str = "range"):
        """
        Initialize position manager

        Args:
            venue: Liquidity venue
            owner: Address that owns the venue positions
            label: Name used in log lines
        """
        self._venue = venue
        self._owner = owner
        self.label = label

    @property
    def owner(self) -> str:
        return self._owner

    def _call(self, operation: str, fn: Callable[..., Any], *args) -> Any:
        try:
            return fn(*args)
        except TrancheManagerError:
            raise
        except Exception as e:
            raise VenueError.call_failed(operation, e) from e

    def supply(self, record: PositionRecord, liquidity: int) -> Tuple[int, int]:
        """
        Add liquidity at the record's existing range

        Args:
            record: Range to add to (liquidity updated in place)
            liquidity: Liquidity to add

        Returns:
            (amount0, amount1) paid into the venue
        """
        check_liquidity_ceiling(f"{self.label} liquidity", record.liquidity + liquidity)
        amounts = self._call("mint", self._venue.mint, self._owner, record.tick_lower, record.tick_upper, liquidity)
        record.liquidity += liquidity
        logger.debug(f"{self.label}: supplied {liquidity} at [{record.tick_lower}, {record.tick_upper}]")
        return amounts

    def remove(self, record: PositionRecord, liquidity: int, recipient: str) -> Tuple[int, int]:
        """
        Burn liquidity and collect exactly the burned principal

        Fees accrued on the range stay owed at the venue until `close`.

        Returns:
            (amount0, amount1) collected to `recipient`
        """
        if liquidity > record.liquidity:
            raise PositionStateError(
                f"{self.label}: cannot remove {liquidity}, range holds {record.liquidity}",
                position_id=record.id,
            )

        burned0, burned1 = self._call(
            "burn", self._venue.burn, self._owner, record.tick_lower, record.tick_upper, liquidity
        )
        collected = self._call(
            "collect", self._venue.collect,
            self._owner, recipient, record.tick_lower, record.tick_upper, burned0, burned1,
        )
        record.liquidity -= liquidity
        return collected

    def close(self, record: PositionRecord, recipient: str) -> Tuple[int, int]:
        """
        Burn all liquidity and collect everything owed on the range

        A range the venue has never seen yields (0, 0).

        Returns:
            (amount0, amount1) collected to `recipient`, fees included
        """
        try:
            self._call("position", self._venue.position, record.id)
        except PositionStateError:
            if record.liquidity > 0:
                raise
            return 0, 0

        if record.liquidity > 0:
            self._call("burn", self._venue.burn, self._owner, record.tick_lower, record.tick_upper, record.liquidity)
        collected = self._call(
            "collect", self._venue.collect,
            self._owner, recipient, record.tick_lower, record.tick_upper, MAX_UINT128, MAX_UINT128,
        )
        logger.debug(f"{self.label}: closed [{record.tick_lower}, {record.tick_upper}] -> {collected}")
        record.liquidity = 0
        return collected

    def reopen(
        self,
        threshold: int,
        tick_lower: int,
        tick_upper: int,
        amount0: int,
        amount1: int,
        sqrt_price_x96: int,
    ) -> Tuple[PositionRecord, int, int]:
        """
        Open a range funded from the given amounts

        Mints the largest liquidity whose rounded-up cost fits the amounts.

        Returns:
            (new record, amount0 used, amount1 used)
        """
        record = PositionRecord.open(self._owner, tick_lower, tick_upper, threshold)
        liquidity = fundable_liquidity(tick_lower, tick_upper, amount0, amount1, sqrt_price_x96)
        if liquidity == 0:
            return record, 0, 0

        used0, used1 = self.supply(record, liquidity)
        return record, used0, used1

    def amounts(self, record: PositionRecord, liquidity: int, sqrt_price_x96: int) -> Tuple[int, int]:
        """Underlying amounts of `liquidity` in this range at the given price"""
        return amounts_from_liquidity(record, liquidity, sqrt_price_x96)


def fundable_liquidity(
    tick_lower: int,
    tick_upper: int,
    amount0: int,
    amount1: int,
    sqrt_price_x96: int,
) -> int:
    """
    Largest liquidity the venue will accept for the given amounts

    The venue charges rounded-up amounts, so the rounded-down liquidity
    can cost a unit more than available. Shrink the budget by the
    overshoot and retry until the cost fits.
    """
    sqrt_a = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_b = get_sqrt_ratio_at_tick(tick_upper)
    budget0, budget1 = amount0, amount1

    while True:
        liquidity = min(
            liquidity_from_amounts(tick_lower, tick_upper, budget0, budget1, sqrt_price_x96),
            MAX_UINT128,
        )
        if liquidity == 0:
            return 0

        need0, need1 = get_amounts_for_liquidity(sqrt_price_x96, sqrt_a, sqrt_b, liquidity, round_up=True)
        if need0 <= amount0 and need1 <= amount1:
            return liquidity

        budget0 = max(0, budget0 - max(0, need0 - amount0))
        budget1 = max(0, budget1 - max(0, need1 - amount1))
