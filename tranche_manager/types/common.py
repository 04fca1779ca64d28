"""
Common type definitions
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from web3 import Web3


# Null identity: deposits/withdrawals to it are rejected
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

# Venue liquidity is a uint128
MAX_UINT128 = 2 ** 128 - 1


def is_null_address(address: Optional[str]) -> bool:
    """True for None, empty string, or the all-zero address"""
    if not address:
        return True
    return address.lower() == NULL_ADDRESS


def normalize_address(address: str) -> str:
    """Return the EIP-55 checksum form of a hex address"""
    return Web3.to_checksum_address(address)


@dataclass(frozen=True)
class Token:
    """
    Unit-of-account asset information

    Attributes:
        address: Token contract address
        symbol: Token symbol (e.g., "WETH", "USDC")
        decimals: Number of decimal places
        name: Full token name (optional)
    """
    address: str
    symbol: str
    decimals: int
    name: str = ""

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.address[:8]}...)"

    def ui_amount(self, raw_amount: int) -> Decimal:
        """Convert raw amount (smallest units) to UI amount"""
        return Decimal(raw_amount) / Decimal(10 ** self.decimals)

    def raw_amount(self, ui_amount: Union[Decimal, float, int, str]) -> int:
        """Convert UI amount to raw amount (smallest units)"""
        if not isinstance(ui_amount, Decimal):
            ui_amount = Decimal(str(ui_amount))
        return int(ui_amount * Decimal(10 ** self.decimals))
