"""
Position type definitions
"""

from dataclasses import dataclass

from web3 import Web3


def compute_position_id(owner: str, tick_lower: int, tick_upper: int) -> str:
    """
    Deterministic position key: keccak256(abi.encodePacked(owner, tickLower, tickUpper))

    Same scheme the venue uses to address a range, so the id can be used
    directly as the venue position key.
    """
    digest = Web3.solidity_keccak(
        ["address", "int24", "int24"],
        [Web3.to_checksum_address(owner), tick_lower, tick_upper],
    )
    return Web3.to_hex(digest)


@dataclass
class PositionRecord:
    """
    One tranche's range at the venue

    Attributes:
        id: Venue position key derived from (owner, tick_lower, tick_upper)
        tick_lower: Lower tick (multiple of tick spacing)
        tick_upper: Upper tick (multiple of tick spacing)
        liquidity: Venue liquidity currently held in this range
        threshold: Half-width in ticks used to recentre this range
    """
    id: str
    tick_lower: int
    tick_upper: int
    liquidity: int
    threshold: int

    @classmethod
    def open(
        cls,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        threshold: int,
        liquidity: int = 0,
    ) -> "PositionRecord":
        """Create a record for a range owned by `owner`"""
        return cls(
            id=compute_position_id(owner, tick_lower, tick_upper),
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity=liquidity,
            threshold=threshold,
        )

    def __str__(self) -> str:
        return f"PositionRecord([{self.tick_lower}, {self.tick_upper}], L={self.liquidity})"

    def __repr__(self) -> str:
        return f"PositionRecord(id={self.id[:10]}..., ticks=[{self.tick_lower}, {self.tick_upper}])"

    @property
    def width(self) -> int:
        """Range width in ticks"""
        return self.tick_upper - self.tick_lower

    def check_in_range(self, tick: int) -> bool:
        """Check if a tick lies inside [tick_lower, tick_upper)"""
        return self.tick_lower <= tick < self.tick_upper

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary"""
        return {
            "id": self.id,
            "tick_lower": self.tick_lower,
            "tick_upper": self.tick_upper,
            "liquidity": self.liquidity,
            "threshold": self.threshold,
        }
