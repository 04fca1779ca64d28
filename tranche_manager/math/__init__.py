"""
Pure integer math: tick/price conversion, ratio allocation, share accounting
"""

from .tick_math import (
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    Q96,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    sqrt_price_x96_to_price,
    tick_to_price,
    price_to_tick,
    align_tick,
    min_usable_tick,
    max_usable_tick,
    target_tick,
    ticks_with_threshold,
    get_amounts_for_liquidity,
    get_liquidity_for_amounts,
    amounts_from_liquidity,
    amounts_value,
    liquidity_value,
    liquidity_from_amounts,
)
from .allocation import amount_from_ratio, split_by_ratio, unallocated_remainder
from .accounting import (
    check_liquidity_ceiling,
    check_deposit,
    shares_to_mint,
    cap_shares_by_value,
    liquidity_to_burn,
    liquidity_to_burn_pair,
    pro_rata,
)

__all__ = [
    # Tick math
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "Q96",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    "sqrt_price_x96_to_price",
    "tick_to_price",
    "price_to_tick",
    "align_tick",
    "min_usable_tick",
    "max_usable_tick",
    "target_tick",
    "ticks_with_threshold",
    "get_amounts_for_liquidity",
    "get_liquidity_for_amounts",
    "amounts_from_liquidity",
    "amounts_value",
    "liquidity_value",
    "liquidity_from_amounts",
    # Allocation
    "amount_from_ratio",
    "split_by_ratio",
    "unallocated_remainder",
    # Accounting
    "check_liquidity_ceiling",
    "check_deposit",
    "shares_to_mint",
    "cap_shares_by_value",
    "liquidity_to_burn",
    "liquidity_to_burn_pair",
    "pro_rata",
]
