"""
Fungible share ledger

Standard mint/burn/transfer bookkeeping for the manager's ownership
shares. Balances are keyed by checksum address.
"""

import logging
from typing import Dict, Tuple

from ..errors import InsufficientFunds, ValidationError
from ..types import is_null_address, normalize_address

logger = logging.getLogger(__name__)


class ShareLedger:
    """
    In-process share token

    Usage:
        ledger = ShareLedger("Tranche LP", "TLP")
        ledger.mint(alice, 1000)
        ledger.transfer(alice, bob, 250)
    """

    def __init__(self, name: str, symbol: str, decimals: int = 18):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances: Dict[str, int] = {}
        self._total_supply = 0

    def __repr__(self) -> str:
        return f"ShareLedger({self.symbol}, supply={self._total_supply})"

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        if is_null_address(holder):
            return 0
        return self._balances.get(normalize_address(holder), 0)

    def holders(self) -> Dict[str, int]:
        """Non-zero balances"""
        return {holder: balance for holder, balance in self._balances.items() if balance > 0}

    def mint(self, recipient: str, amount: int) -> None:
        """
        Create shares for a recipient

        Raises:
            ValidationError: If recipient is null or amount is negative
        """
        if is_null_address(recipient):
            raise ValidationError.null_recipient()
        if amount < 0:
            raise ValidationError(f"Cannot mint negative amount {amount}", field="amount")

        holder = normalize_address(recipient)
        self._balances[holder] = self._balances.get(holder, 0) + amount
        self._total_supply += amount
        logger.debug(f"Minted {amount} {self.symbol} to {holder}")

    def burn(self, owner: str, amount: int) -> None:
        """
        Destroy shares held by an owner

        Raises:
            InsufficientFunds: If owner holds fewer than `amount` shares
        """
        if amount < 0:
            raise ValidationError(f"Cannot burn negative amount {amount}", field="amount")

        available = self.balance_of(owner)
        if available < amount:
            raise InsufficientFunds.share_balance(str(owner), amount, available)

        holder = normalize_address(owner)
        self._balances[holder] = available - amount
        self._total_supply -= amount
        logger.debug(f"Burned {amount} {self.symbol} from {holder}")

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """
        Move shares between holders

        Raises:
            ValidationError: If recipient is null
            InsufficientFunds: If sender holds fewer than `amount` shares
        """
        if is_null_address(recipient):
            raise ValidationError.null_recipient()
        if amount < 0:
            raise ValidationError(f"Cannot transfer negative amount {amount}", field="amount")

        available = self.balance_of(sender)
        if available < amount:
            raise InsufficientFunds.share_balance(str(sender), amount, available)

        source = normalize_address(sender)
        target = normalize_address(recipient)
        self._balances[source] = available - amount
        self._balances[target] = self._balances.get(target, 0) + amount

    def snapshot(self) -> Tuple[Dict[str, int], int]:
        return dict(self._balances), self._total_supply

    def restore(self, snapshot: Tuple[Dict[str, int], int]) -> None:
        balances, total_supply = snapshot
        self._balances = dict(balances)
        self._total_supply = total_supply
