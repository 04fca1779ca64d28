"""
Ratio allocation of deposits across the two tranches
"""

from typing import Tuple


def amount_from_ratio(amount: int, ratio: int) -> int:
    """
    Portion of an amount for a percentage ratio

    Formula: amount * ratio // 100 (floor division)

    Args:
        amount: Amount to split
        ratio: Percentage in [0, 100]

    Returns:
        Rounded-down portion
    """
    return amount * ratio // 100


def split_by_ratio(amount: int, ratio1: int, ratio2: int) -> Tuple[int, int]:
    """
    Split an amount between tranche 0 and tranche 1

    Each side is rounded down independently, so the two parts can sum to
    less than `amount`. See `unallocated_remainder`.

    Returns:
        (tranche0_amount, tranche1_amount)
    """
    return amount_from_ratio(amount, ratio1), amount_from_ratio(amount, ratio2)


def unallocated_remainder(amount: int, ratio1: int, ratio2: int) -> int:
    """Part of `amount` lost to floor division in `split_by_ratio`"""
    part1, part2 = split_by_ratio(amount, ratio1, ratio2)
    return amount - part1 - part2
