"""
Construction parameters for a two-tranche manager
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .common import Token
from ..errors import ConfigurationError
from ..config import config as global_config


@dataclass(frozen=True)
class ManagerParams:
    """
    Immutable construction parameters

    Attributes:
        name: Share token display name
        symbol: Share token symbol
        asset: Unit-of-account asset
        threshold1: Half-width in ticks of tranche 0
        threshold2: Half-width in ticks of tranche 1
        ratio1: Percentage of each deposit routed to tranche 0
        ratio2: Percentage of each deposit routed to tranche 1
        delay: Minimum seconds between rebalances (config default if None)
        min_threshold: Lower threshold bound (config default if None)
        max_threshold: Upper threshold bound (config default if None)
    """
    name: str
    symbol: str
    asset: Token
    threshold1: int
    threshold2: int
    ratio1: int
    ratio2: int
    delay: Optional[int] = None
    min_threshold: Optional[int] = None
    max_threshold: Optional[int] = None
    metadata: dict = field(default_factory=dict, compare=False)

    @property
    def thresholds(self) -> Tuple[int, int]:
        return (self.threshold1, self.threshold2)

    @property
    def ratios(self) -> Tuple[int, int]:
        return (self.ratio1, self.ratio2)

    @property
    def effective_delay(self) -> int:
        if self.delay is None:
            return global_config.manager.rebalance_delay
        return self.delay

    @property
    def threshold_bounds(self) -> Tuple[int, int]:
        lower = self.min_threshold
        upper = self.max_threshold
        if lower is None:
            lower = global_config.manager.min_threshold
        if upper is None:
            upper = global_config.manager.max_threshold
        return (lower, upper)

    def validate(self, tick_spacing: int) -> None:
        """
        Check every construction invariant against the venue tick spacing

        Raises:
            ConfigurationError: On the first violated invariant
        """
        if not self.name or not self.symbol:
            raise ConfigurationError.missing("name/symbol")

        if tick_spacing <= 0:
            raise ConfigurationError.invalid("tick_spacing", f"must be positive, got {tick_spacing}")

        if self.effective_delay < 0:
            raise ConfigurationError.invalid("delay", f"must not be negative, got {self.effective_delay}")

        for label, ratio in (("ratio1", self.ratio1), ("ratio2", self.ratio2)):
            if ratio < 0:
                raise ConfigurationError.invalid(label, f"must not be negative, got {ratio}")
        if self.ratio1 + self.ratio2 != 100:
            raise ConfigurationError.invalid(
                "ratio1/ratio2", f"ratios must sum to 100, got {self.ratio1} + {self.ratio2}"
            )

        min_threshold, max_threshold = self.threshold_bounds
        if min_threshold > max_threshold:
            raise ConfigurationError.invalid(
                "min_threshold/max_threshold", f"empty window [{min_threshold}, {max_threshold}]"
            )

        for label, threshold in (("threshold1", self.threshold1), ("threshold2", self.threshold2)):
            if threshold <= 0:
                raise ConfigurationError.invalid(label, f"must be positive, got {threshold}")
            if not min_threshold <= threshold <= max_threshold:
                raise ConfigurationError.invalid(
                    label, f"{threshold} outside [{min_threshold}, {max_threshold}]"
                )
            if threshold % tick_spacing != 0:
                raise ConfigurationError.invalid(
                    label, f"{threshold} is not a multiple of tick spacing {tick_spacing}"
                )
