"""
Rebalance Scheduler

Cooldown gate and single-read orchestration of a rebalance:
awaiting-cooldown -> eligible -> in-progress -> complete.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional, Tuple, TypeVar

from ..errors import ConfigurationError, RebalanceCooldown
from ..math.tick_math import target_tick
from ..protocols.base import PriceOracle

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RebalancePhase(Enum):
    """Rebalance lifecycle"""
    AWAITING_COOLDOWN = "awaiting-cooldown"
    ELIGIBLE = "eligible"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"


class RebalanceScheduler:
    """
    Cooldown-gated rebalance driver

    The scheduler holds no timestamp of its own; the caller passes the
    last rebalance time and stores the timestamp `run` returns.

    Usage:
        scheduler = RebalanceScheduler(delay=3600)
        target, now, result = scheduler.run(last_time, oracle, recentre)
    """

    def __init__(self, delay: int, clock: Optional[Callable[[], float]] = None):
        """
        Initialize scheduler

        Args:
            delay: Minimum seconds between rebalances
            clock: Returns the current unix time (defaults to time.time)
        """
        if delay < 0:
            raise ConfigurationError.invalid("delay", f"must not be negative, got {delay}")
        self.delay = delay
        self._clock = clock or time.time
        self._running = False

    def now(self) -> int:
        return int(self._clock())

    def is_eligible(self, last_rebalance_time: int, now: Optional[int] = None) -> bool:
        if now is None:
            now = self.now()
        return now - last_rebalance_time >= self.delay

    def seconds_until(self, last_rebalance_time: int, now: Optional[int] = None) -> int:
        """Seconds until eligible, 0 if eligible now"""
        if now is None:
            now = self.now()
        return max(0, self.delay - (now - last_rebalance_time))

    def phase(self, last_rebalance_time: int, now: Optional[int] = None) -> RebalancePhase:
        """
        Phase derived from the stored timestamp

        COMPLETE while the clock still reads the time of the last
        rebalance, then AWAITING_COOLDOWN until ELIGIBLE.
        """
        if self._running:
            return RebalancePhase.IN_PROGRESS
        if now is None:
            now = self.now()
        if self.is_eligible(last_rebalance_time, now):
            return RebalancePhase.ELIGIBLE
        if last_rebalance_time > 0 and now == last_rebalance_time:
            return RebalancePhase.COMPLETE
        return RebalancePhase.AWAITING_COOLDOWN

    def ensure_eligible(self, last_rebalance_time: int, now: int) -> None:
        """
        Raises:
            RebalanceCooldown: If fewer than `delay` seconds have elapsed
        """
        if not self.is_eligible(last_rebalance_time, now):
            raise RebalanceCooldown.not_elapsed(now - last_rebalance_time, self.delay)

    def run(
        self,
        last_rebalance_time: int,
        oracle: PriceOracle,
        recentre: Callable[[int], T],
    ) -> Tuple[int, int, T]:
        """
        Execute one rebalance

        Reads the oracle exactly once and hands the target tick to
        `recentre`, which must recentre both tranches on it.

        Args:
            last_rebalance_time: Timestamp of the previous rebalance
            oracle: Target tick source
            recentre: Callback performing the per-tranche close/reopen

        Returns:
            (target_tick, new_last_rebalance_time, recentre result)

        Raises:
            RebalanceCooldown: Cooldown not elapsed (nothing is read or changed)
            OracleUnavailable: Oracle failed
        """
        now = self.now()
        self.ensure_eligible(last_rebalance_time, now)

        self._running = True
        try:
            target = target_tick(oracle)
            logger.info(f"Rebalancing on target tick {target} at {now}")
            result = recentre(target)
        finally:
            self._running = False

        # Advanced even when the ranges did not move
        return target, now, result
