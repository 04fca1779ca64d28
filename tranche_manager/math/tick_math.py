"""
Tick Math Utilities

Integer Q64.96 tick/price conversion and liquidity <-> amount conversion,
bit-compatible with the venue's fixed-point libraries.
"""

import math
from decimal import Decimal
from fractions import Fraction
from typing import Tuple, TYPE_CHECKING

from ..errors import ConfigurationError, OracleUnavailable

if TYPE_CHECKING:
    from ..protocols.base import PriceOracle
    from ..types import PositionRecord


MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

Q96 = 2 ** 96
_Q128_ONE = 0x100000000000000000000000000000000
_MAX_UINT256 = 2 ** 256 - 1

# 2^128 / sqrt(1.0001)^(2^i) for i = 0..19
_TICK_CONSTANTS = [
    0xfffcb933bd6fad37aa2d162d1a594001,
    0xfff97272373d413259a46990580e213a,
    0xfff2e50f5f656932ef12357cf3c7fdcc,
    0xffe5caca7e10e4e61c3624eaa0941cd0,
    0xffcb9843d60f6159c9db58835c926644,
    0xff973b41fa98c081472e6896dfb254c0,
    0xff2ea16466c96a3843ec78b326b52861,
    0xfe5dee046a99a2a811c461f1969c3053,
    0xfcbe86c7900a88aedcffc83b479aa3a4,
    0xf987a7253ac413176f2b074cf7815e54,
    0xf3392b0822b70005940c7a398e4b70f3,
    0xe7159475a2c29b7443b29c7fa6e889d9,
    0xd097f3bdfd2022b8845ad8f792aa5825,
    0xa9f746462d870fdf8a65dc1f90e061e5,
    0x70d869a156d2a1b890bb3df62baf32f7,
    0x31be135f97d08fd981231505542fcfa6,
    0x9aa508b5b7a84e1c677de54f3e99bc9,
    0x5d6af8dedb81196699c329225ee604,
    0x2216e584f5fa1ea926041bedfe98,
    0x48a170391f7dc42444e8fa2,
]


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)"""
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)"""
    return -((-(a * b)) // denominator)


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """
    Convert tick to sqrt price in Q64.96 fixed-point format

    Args:
        tick: Tick index

    Returns:
        sqrt(1.0001^tick) * 2^96, rounded up
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ConfigurationError.invalid("tick", f"tick must be in [{MIN_TICK}, {MAX_TICK}], got {tick}")

    tick_abs = abs(tick)

    ratio = _TICK_CONSTANTS[0] if (tick_abs & 0x1) != 0 else _Q128_ONE
    for i in range(1, 20):
        if (tick_abs & (1 << i)) != 0:
            ratio = (ratio * _TICK_CONSTANTS[i]) >> 128

    # The table computes 1.0001^(-|tick|/2); invert for positive ticks
    if tick > 0:
        ratio = _MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """
    Greatest tick whose sqrt ratio is <= sqrt_price_x96

    Starts from a float estimate and corrects it against the exact table.
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise ConfigurationError.invalid(
            "sqrt_price_x96", f"must be in [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO}), got {sqrt_price_x96}"
        )

    ratio = sqrt_price_x96 / Q96
    tick = math.floor(2 * math.log(ratio) / math.log(1.0001))
    tick = max(MIN_TICK, min(MAX_TICK, tick))

    while tick > MIN_TICK and get_sqrt_ratio_at_tick(tick) > sqrt_price_x96:
        tick -= 1
    while tick < MAX_TICK and get_sqrt_ratio_at_tick(tick + 1) <= sqrt_price_x96:
        tick += 1
    return tick


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimals0: int = 18,
    decimals1: int = 18,
) -> Decimal:
    """Convert sqrtPriceX96 to human-readable price (token1 per token0)"""
    price = (Decimal(sqrt_price_x96) / Decimal(Q96)) ** 2
    decimal_adjustment = Decimal(10) ** (decimals0 - decimals1)
    return price * decimal_adjustment


def tick_to_price(tick: int, decimals0: int = 18, decimals1: int = 18) -> Decimal:
    """Convert tick to human-readable price (token1 per token0)"""
    return sqrt_price_x96_to_price(get_sqrt_ratio_at_tick(tick), decimals0, decimals1)


def price_to_tick(
    price: Decimal,
    decimals0: int = 18,
    decimals1: int = 18,
    tick_spacing: int = 1,
) -> int:
    """
    Convert human-readable price (token1 per token0) to a tick

    Rounded down to the tick spacing and clamped to the valid tick range.
    """
    decimal_adjustment = Decimal(10) ** (decimals0 - decimals1)
    adjusted_price = Decimal(price) / decimal_adjustment
    if adjusted_price <= 0:
        raise ConfigurationError.invalid("price", f"must be positive, got {price}")

    # floor(), not int(): int() truncates toward 0 for prices < 1
    tick = math.floor(math.log(float(adjusted_price)) / math.log(1.0001))
    tick = align_tick(tick, tick_spacing)

    return max(min_usable_tick(tick_spacing), min(max_usable_tick(tick_spacing), tick))


def align_tick(tick: int, tick_spacing: int) -> int:
    """Round a tick down (toward negative infinity) to a multiple of tick_spacing"""
    return (tick // tick_spacing) * tick_spacing


def min_usable_tick(tick_spacing: int) -> int:
    return -(MAX_TICK // tick_spacing) * tick_spacing


def max_usable_tick(tick_spacing: int) -> int:
    return (MAX_TICK // tick_spacing) * tick_spacing


def target_tick(oracle: "PriceOracle") -> int:
    """
    Read the oracle target tick once

    Raises:
        OracleUnavailable: If the oracle fails or returns a non-integer / out-of-range tick
    """
    try:
        tick = oracle.target_tick()
    except OracleUnavailable:
        raise
    except Exception as e:
        raise OracleUnavailable.unreachable(type(oracle).__name__, e) from e

    if isinstance(tick, bool) or not isinstance(tick, int):
        raise OracleUnavailable.invalid_response(type(oracle).__name__, f"tick is not an int: {tick!r}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise OracleUnavailable.invalid_response(type(oracle).__name__, f"tick {tick} out of range")
    return tick


def ticks_with_threshold(target: int, threshold: int, tick_spacing: int) -> Tuple[int, int]:
    """
    Symmetric range around a target tick

    Both bounds are floored (toward negative infinity) to the tick spacing,
    the venue's own rounding rule for usable ticks, so the nearest multiple
    is always the one at or below the exact bound. Bounds are then clamped
    to the usable tick range. With a positive threshold that is a multiple
    of the spacing, upper - lower == 2 * threshold unless clamped, so
    lower < upper always.

    Returns:
        (tick_lower, tick_upper)
    """
    if threshold <= 0:
        raise ConfigurationError.invalid("threshold", f"must be positive, got {threshold}")

    tick_lower = align_tick(target - threshold, tick_spacing)
    tick_upper = align_tick(target + threshold, tick_spacing)

    tick_lower = max(min_usable_tick(tick_spacing), tick_lower)
    tick_upper = min(max_usable_tick(tick_spacing), tick_upper)

    if tick_lower >= tick_upper:
        # Only reachable when clamped at an edge of the tick range
        if tick_upper == max_usable_tick(tick_spacing):
            tick_lower = tick_upper - tick_spacing
        else:
            tick_upper = tick_lower + tick_spacing

    return tick_lower, tick_upper


def get_amount0_for_liquidity(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False,
) -> int:
    """
    Token0 amount for liquidity between two sqrt prices

    Formula: liquidity * 2^96 * (sqrtB - sqrtA) / sqrtB / sqrtA
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if liquidity == 0 or sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        return 0

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        partial = mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96)
        return -((-partial) // sqrt_ratio_a_x96)
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_for_liquidity(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False,
) -> int:
    """
    Token1 amount for liquidity between two sqrt prices

    Formula: liquidity * (sqrtB - sqrtA) / 2^96
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if liquidity == 0:
        return 0

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_amounts_for_liquidity(
    sqrt_price_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False,
) -> Tuple[int, int]:
    """
    Token amounts represented by liquidity in a range at the current price

    Args:
        sqrt_price_x96: Current pool sqrt price
        sqrt_ratio_a_x96: Sqrt price at one range bound
        sqrt_ratio_b_x96: Sqrt price at the other range bound
        liquidity: Liquidity amount
        round_up: Round in the venue's favour (amounts owed on mint)

    Returns:
        (amount0, amount1) raw token amounts
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_price_x96 <= sqrt_ratio_a_x96:
        # Below range: only token0
        amount0 = get_amount0_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up)
        amount1 = 0
    elif sqrt_price_x96 < sqrt_ratio_b_x96:
        # In range: both tokens
        amount0 = get_amount0_for_liquidity(sqrt_price_x96, sqrt_ratio_b_x96, liquidity, round_up)
        amount1 = get_amount1_for_liquidity(sqrt_ratio_a_x96, sqrt_price_x96, liquidity, round_up)
    else:
        # Above range: only token1
        amount0 = 0
        amount1 = get_amount1_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, round_up)

    return amount0, amount1


def get_liquidity_for_amount0(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount0: int) -> int:
    """Formula: amount0 * (sqrtA * sqrtB / 2^96) / (sqrtB - sqrtA)"""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if amount0 == 0 or sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        return 0

    intermediate = mul_div(sqrt_ratio_a_x96, sqrt_ratio_b_x96, Q96)
    return mul_div(amount0, intermediate, sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amount1(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int, amount1: int) -> int:
    """Formula: amount1 * 2^96 / (sqrtB - sqrtA)"""
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if amount1 == 0 or sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        return 0

    return mul_div(amount1, Q96, sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def get_liquidity_for_amounts(
    sqrt_price_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int,
) -> int:
    """
    Maximum liquidity that the given amounts can fund in a range

    Args:
        sqrt_price_x96: Current pool sqrt price
        sqrt_ratio_a_x96: Sqrt price at one range bound
        sqrt_ratio_b_x96: Sqrt price at the other range bound
        amount0: Available token0
        amount1: Available token1
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_price_x96 <= sqrt_ratio_a_x96:
        return get_liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)
    elif sqrt_price_x96 < sqrt_ratio_b_x96:
        liquidity0 = get_liquidity_for_amount0(sqrt_price_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_price_x96, amount1)
        return min(liquidity0, liquidity1)
    else:
        return get_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def amounts_from_liquidity(
    position: "PositionRecord",
    liquidity: int,
    sqrt_price_x96: int,
    round_up: bool = False,
) -> Tuple[int, int]:
    """
    Underlying amounts a liquidity amount represents in a tranche's range

    Computed fresh from the given live price on every call.
    """
    return get_amounts_for_liquidity(
        sqrt_price_x96,
        get_sqrt_ratio_at_tick(position.tick_lower),
        get_sqrt_ratio_at_tick(position.tick_upper),
        liquidity,
        round_up=round_up,
    )


def amounts_value(amount0: int, amount1: int, sqrt_price_x96: int) -> int:
    """
    Value of a token pair in token1 units, scaled by 2^192

    Formula: amount0 * sqrtPriceX96^2 + amount1 * 2^192 (exact, no rounding)
    """
    return amount0 * sqrt_price_x96 * sqrt_price_x96 + amount1 * Q96 * Q96


def liquidity_value(tick_lower: int, tick_upper: int, liquidity: int, sqrt_price_x96: int) -> Fraction:
    """
    Exact value of liquidity in a range, same units as amounts_value

    Uses the unrounded amounts, so it sits between what a burn returns and
    what a mint charges.
    """
    sqrt_a = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_b = get_sqrt_ratio_at_tick(tick_upper)
    price = sqrt_price_x96 * sqrt_price_x96

    if sqrt_price_x96 <= sqrt_a:
        amount0 = Fraction(liquidity * Q96 * (sqrt_b - sqrt_a), sqrt_a * sqrt_b)
        return amount0 * price
    if sqrt_price_x96 >= sqrt_b:
        return Fraction(liquidity * (sqrt_b - sqrt_a) * Q96)

    amount0 = Fraction(liquidity * Q96 * (sqrt_b - sqrt_price_x96), sqrt_price_x96 * sqrt_b)
    return amount0 * price + liquidity * (sqrt_price_x96 - sqrt_a) * Q96


def liquidity_from_amounts(
    tick_lower: int,
    tick_upper: int,
    amount0: int,
    amount1: int,
    sqrt_price_x96: int,
) -> int:
    """Liquidity fundable in [tick_lower, tick_upper] from the given amounts"""
    return get_liquidity_for_amounts(
        sqrt_price_x96,
        get_sqrt_ratio_at_tick(tick_lower),
        get_sqrt_ratio_at_tick(tick_upper),
        amount0,
        amount1,
    )
