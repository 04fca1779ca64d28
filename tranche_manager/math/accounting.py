"""
Liquidity <-> share accounting

Converts between venue-native liquidity units and the manager's issued
shares. All arithmetic is integer floor division.
"""

from fractions import Fraction
from typing import Sequence, Tuple, Union

from ..errors import LiquidityOverflow, PositionStateError
from ..types import MAX_UINT128


def check_liquidity_ceiling(what: str, value: int, ceiling: int = MAX_UINT128) -> int:
    """
    Ensure a liquidity figure fits the venue's representation

    Raises:
        LiquidityOverflow: If value > ceiling
    """
    if value > ceiling:
        raise LiquidityOverflow.exceeds_ceiling(what, value, ceiling)
    return value


def shares_to_mint(
    deposited: int,
    total_liquidity_before: int,
    total_shares_before: int,
) -> int:
    """
    Shares issued for newly deposited liquidity

    The first deposit mints 1:1. Later deposits mint
    deposited * total_shares_before // total_liquidity_before, so the new
    shares are the same fraction of supply as the new liquidity is of the
    liquidity already held.

    Args:
        deposited: Liquidity added by this deposit (both tranches)
        total_liquidity_before: Combined tranche liquidity before the deposit
        total_shares_before: Share supply before the deposit

    Returns:
        Shares to mint

    Raises:
        PositionStateError: If shares exist but no liquidity backs them
    """
    if total_shares_before == 0:
        return deposited
    if total_liquidity_before == 0:
        raise PositionStateError.unbacked_shares(total_shares_before)
    return deposited * total_shares_before // total_liquidity_before


def cap_shares_by_value(
    shares: int,
    value_in: int,
    total_value_before: Union[int, Fraction],
    total_shares_before: int,
) -> int:
    """
    Limit liquidity-priced shares to what the deposit is worth

    A deposit may not claim a larger fraction of supply than its value is
    of everything held before it (both tranches plus idle reserves). The
    depositor pays rounded-up amounts, so when the tranches hold liquidity
    in the deposit split and no reserves are idle the cap never binds.

    Args:
        shares: Shares priced on liquidity
        value_in: Value paid by the depositor
        total_value_before: Exact value held before the deposit
        total_shares_before: Share supply before the deposit

    Returns:
        min(shares, value_in * total_shares_before // total_value_before)
    """
    if total_shares_before == 0 or total_value_before == 0:
        return shares
    return min(shares, value_in * total_shares_before // total_value_before)


def check_deposit(
    tranche_liquidity: Sequence[int],
    deposits: Sequence[int],
    ceiling: int = MAX_UINT128,
) -> None:
    """
    Reject a deposit that would push any tranche past the liquidity ceiling

    Raises:
        LiquidityOverflow: For the first tranche that would overflow
    """
    for index, (held, added) in enumerate(zip(tranche_liquidity, deposits)):
        check_liquidity_ceiling(f"tranche {index} liquidity", held + added, ceiling)


def liquidity_to_burn(share_amount: int, tranche_liquidity: int, total_shares: int) -> int:
    """
    Liquidity removed from one tranche when burning shares

    Formula: share_amount * tranche_liquidity // total_shares

    Raises:
        LiquidityOverflow: If the result reaches the liquidity ceiling
    """
    if total_shares == 0:
        return 0
    burn = share_amount * tranche_liquidity // total_shares
    if burn >= MAX_UINT128:
        raise LiquidityOverflow.exceeds_ceiling("liquidity to burn", burn, MAX_UINT128)
    return burn


def liquidity_to_burn_pair(
    share_amount: int,
    tranche_liquidity: Tuple[int, int],
    total_shares: int,
) -> Tuple[int, int]:
    """Per-tranche burn amounts, each from that tranche's own liquidity"""
    return (
        liquidity_to_burn(share_amount, tranche_liquidity[0], total_shares),
        liquidity_to_burn(share_amount, tranche_liquidity[1], total_shares),
    )


def pro_rata(share_amount: int, amount: int, total_shares: int) -> int:
    """Holder's floor share of an amount held by the manager"""
    if total_shares == 0:
        return 0
    return share_amount * amount // total_shares
