"""
Test Tick Math Module

Tests for Q64.96 tick/price conversions, range derivation and
liquidity <-> amount conversion.
"""

import sys
from decimal import Decimal
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

Q96 = 2 ** 96


def test_get_sqrt_ratio_at_tick():
    """Test tick to sqrt price conversion against the venue's known bounds"""
    from tranche_manager.math.tick_math import (
        get_sqrt_ratio_at_tick,
        MIN_TICK,
        MAX_TICK,
        MIN_SQRT_RATIO,
        MAX_SQRT_RATIO,
    )

    print("Testing get_sqrt_ratio_at_tick...")

    assert get_sqrt_ratio_at_tick(0) == Q96, "Tick 0 should be exactly 2^96"
    assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
    assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    # Strictly increasing
    previous = get_sqrt_ratio_at_tick(-1000)
    for tick in range(-999, 1000, 37):
        current = get_sqrt_ratio_at_tick(tick)
        assert current > previous, f"sqrt ratio not increasing at tick {tick}"
        previous = current

    # sqrt(1.0001^t) * sqrt(1.0001^-t) == 1
    for tick in (1, 60, 12345, 200000):
        product = get_sqrt_ratio_at_tick(tick) * get_sqrt_ratio_at_tick(-tick)
        assert abs(product - Q96 * Q96) / (Q96 * Q96) < 1e-12, f"Asymmetric at tick {tick}"

    # Close to the float formula
    for tick in (-50000, -1, 1, 50000):
        expected = (1.0001 ** (tick / 2)) * Q96
        assert abs(get_sqrt_ratio_at_tick(tick) - expected) / expected < 1e-9

    from tranche_manager.errors import ConfigurationError
    for bad in (MIN_TICK - 1, MAX_TICK + 1):
        try:
            get_sqrt_ratio_at_tick(bad)
            assert False, f"Should raise for tick {bad}"
        except ConfigurationError:
            pass

    print("  get_sqrt_ratio_at_tick: PASSED")


def test_get_tick_at_sqrt_ratio():
    """Test the inverse conversion is exact on and between ticks"""
    from tranche_manager.math.tick_math import (
        get_sqrt_ratio_at_tick,
        get_tick_at_sqrt_ratio,
        MIN_TICK,
        MIN_SQRT_RATIO,
        MAX_SQRT_RATIO,
    )

    print("Testing get_tick_at_sqrt_ratio...")

    assert get_tick_at_sqrt_ratio(Q96) == 0
    assert get_tick_at_sqrt_ratio(MIN_SQRT_RATIO) == MIN_TICK

    for tick in (-887000, -60000, -61, -1, 1, 59, 60000, 887000):
        sqrt_ratio = get_sqrt_ratio_at_tick(tick)
        assert get_tick_at_sqrt_ratio(sqrt_ratio) == tick, f"Round trip failed at {tick}"
        assert get_tick_at_sqrt_ratio(sqrt_ratio - 1) == tick - 1, f"Floor failed below {tick}"

    from tranche_manager.errors import ConfigurationError
    try:
        get_tick_at_sqrt_ratio(MAX_SQRT_RATIO)
        assert False, "MAX_SQRT_RATIO itself is out of range"
    except ConfigurationError:
        pass

    print("  get_tick_at_sqrt_ratio: PASSED")


def test_align_tick():
    """Test flooring to tick spacing, including negative ticks"""
    from tranche_manager.math.tick_math import align_tick, min_usable_tick, max_usable_tick

    print("Testing align_tick...")

    assert align_tick(125, 60) == 120
    assert align_tick(120, 60) == 120
    assert align_tick(-125, 60) == -180, "Negative ticks round toward -infinity"
    assert align_tick(-120, 60) == -120
    assert align_tick(7, 1) == 7

    assert max_usable_tick(60) == 887220
    assert min_usable_tick(60) == -887220
    assert max_usable_tick(1) == 887272

    print("  align_tick: PASSED")


def test_ticks_with_threshold():
    """Test symmetric range derivation"""
    from tranche_manager.math.tick_math import ticks_with_threshold

    print("Testing ticks_with_threshold...")

    assert ticks_with_threshold(0, 600, 60) == (-600, 600)
    assert ticks_with_threshold(125, 600, 60) == (-480, 720)
    assert ticks_with_threshold(-125, 600, 60) == (-780, 420)
    assert ticks_with_threshold(120, 60, 60) == (60, 180)
    # Floored, not rounded to the nearest multiple: exact bounds are (-10, 110)
    assert ticks_with_threshold(50, 60, 60) == (-60, 60)

    # Width is exactly 2 * threshold when the threshold is aligned
    for target in (-100003, -7, 0, 59, 88888):
        lower, upper = ticks_with_threshold(target, 1200, 60)
        assert upper - lower == 2400
        assert lower % 60 == 0 and upper % 60 == 0
        assert lower < upper

    # Clamped at the edges of the tick range, still non-empty
    lower, upper = ticks_with_threshold(887000, 600, 60)
    assert (lower, upper) == (886380, 887220)
    lower, upper = ticks_with_threshold(887272, 60, 60)
    assert lower < upper and upper == 887220
    lower, upper = ticks_with_threshold(-887272, 60, 60)
    assert lower < upper and lower == -887220

    from tranche_manager.errors import ConfigurationError
    try:
        ticks_with_threshold(0, 0, 60)
        assert False, "Zero threshold should be rejected"
    except ConfigurationError:
        pass

    print("  ticks_with_threshold: PASSED")


def test_amounts_for_liquidity():
    """Test piecewise liquidity to amount conversion"""
    from tranche_manager.math.tick_math import (
        get_amounts_for_liquidity,
        get_sqrt_ratio_at_tick,
    )

    print("Testing get_amounts_for_liquidity...")

    # Exact values on power-of-two prices
    amount0, amount1 = get_amounts_for_liquidity(Q96 // 2, Q96, 2 * Q96, 1000)
    assert (amount0, amount1) == (500, 0), "Below range holds only token0"

    amount0, amount1 = get_amounts_for_liquidity(4 * Q96, Q96, 2 * Q96, 1000)
    assert (amount0, amount1) == (0, 1000), "Above range holds only token1"

    sqrt_a = get_sqrt_ratio_at_tick(-600)
    sqrt_b = get_sqrt_ratio_at_tick(600)
    amount0, amount1 = get_amounts_for_liquidity(Q96, sqrt_a, sqrt_b, 10 ** 18)
    assert amount0 > 0 and amount1 > 0, "In range holds both tokens"
    # Symmetric range at tick 0 holds roughly equal amounts
    assert abs(amount0 - amount1) / amount0 < 0.001

    # Bound order does not matter
    assert get_amounts_for_liquidity(Q96, sqrt_b, sqrt_a, 10 ** 18) == (amount0, amount1)

    # Rounding up never gives less
    up0, up1 = get_amounts_for_liquidity(Q96, sqrt_a, sqrt_b, 10 ** 18, round_up=True)
    assert up0 >= amount0 and up1 >= amount1
    assert up0 - amount0 <= 1 and up1 - amount1 <= 1

    assert get_amounts_for_liquidity(Q96, sqrt_a, sqrt_b, 0) == (0, 0)

    print("  get_amounts_for_liquidity: PASSED")


def test_liquidity_for_amounts():
    """Test amount to liquidity conversion"""
    from tranche_manager.math.tick_math import (
        get_liquidity_for_amounts,
        get_amounts_for_liquidity,
        get_sqrt_ratio_at_tick,
        liquidity_from_amounts,
    )

    print("Testing get_liquidity_for_amounts...")

    # Exact values on power-of-two prices
    assert get_liquidity_for_amounts(Q96 // 2, Q96, 2 * Q96, 500, 0) == 1000
    assert get_liquidity_for_amounts(4 * Q96, Q96, 2 * Q96, 0, 1000) == 1000

    # In range: limited by the scarcer token
    sqrt_a = get_sqrt_ratio_at_tick(-600)
    sqrt_b = get_sqrt_ratio_at_tick(600)
    amount0, amount1 = get_amounts_for_liquidity(Q96, sqrt_a, sqrt_b, 10 ** 18)
    liquidity = get_liquidity_for_amounts(Q96, sqrt_a, sqrt_b, amount0, amount1)
    assert liquidity <= 10 ** 18
    assert 10 ** 18 - liquidity < 10 ** 18 // 10 ** 9

    half = get_liquidity_for_amounts(Q96, sqrt_a, sqrt_b, amount0 // 2, amount1)
    assert half < liquidity, "Halving one side should limit liquidity"

    # Tick-based wrapper matches
    assert liquidity_from_amounts(-600, 600, amount0, amount1, Q96) == liquidity

    print("  get_liquidity_for_amounts: PASSED")


def test_amounts_from_liquidity():
    """Test conversion for a tranche record at the live price"""
    from tranche_manager.math.tick_math import amounts_from_liquidity, get_sqrt_ratio_at_tick
    from tranche_manager.types import PositionRecord

    print("Testing amounts_from_liquidity...")

    owner = "0x" + "ab" * 20
    record = PositionRecord.open(owner, -600, 600, threshold=600, liquidity=10 ** 18)

    inside = amounts_from_liquidity(record, 10 ** 18, Q96)
    below = amounts_from_liquidity(record, 10 ** 18, get_sqrt_ratio_at_tick(-1200))
    above = amounts_from_liquidity(record, 10 ** 18, get_sqrt_ratio_at_tick(1200))

    assert inside[0] > 0 and inside[1] > 0
    assert below[0] > 0 and below[1] == 0
    assert above[0] == 0 and above[1] > 0

    # Price moves change the answer: nothing is cached
    assert amounts_from_liquidity(record, 10 ** 18, get_sqrt_ratio_at_tick(300)) != inside

    print("  amounts_from_liquidity: PASSED")


def test_price_to_tick():
    """Test human price to tick conversion"""
    from tranche_manager.math.tick_math import price_to_tick, tick_to_price

    print("Testing price_to_tick...")

    assert price_to_tick(Decimal(1)) == 0
    assert price_to_tick(Decimal(2)) == 6931
    assert price_to_tick(Decimal("0.5")) == -6932, "Prices below 1 floor toward -infinity"

    # WETH (18) / USDC (6) at 2000 USDC per WETH
    tick = price_to_tick(Decimal(2000), 18, 6)
    assert -200320 <= tick <= -200300, f"Unexpected tick {tick}"

    aligned = price_to_tick(Decimal(2000), 18, 6, tick_spacing=60)
    assert aligned % 60 == 0 and aligned <= tick

    price = tick_to_price(tick, 18, 6)
    assert abs(float(price) - 2000) / 2000 < 0.001

    print("  price_to_tick: PASSED")


def test_target_tick():
    """Test oracle reads are validated and wrapped"""
    from unittest.mock import MagicMock
    from tranche_manager.math.tick_math import target_tick, MAX_TICK
    from tranche_manager.errors import OracleUnavailable, ErrorCode

    print("Testing target_tick...")

    oracle = MagicMock()
    oracle.target_tick.return_value = 120
    assert target_tick(oracle) == 120
    assert oracle.target_tick.call_count == 1

    oracle.target_tick.side_effect = RuntimeError("feed down")
    try:
        target_tick(oracle)
        assert False, "Should raise OracleUnavailable"
    except OracleUnavailable as e:
        assert e.code == ErrorCode.ORACLE_UNAVAILABLE
        assert isinstance(e.original_error, RuntimeError)

    for bad in (MAX_TICK + 1, 1.5, "100", True):
        oracle = MagicMock()
        oracle.target_tick.return_value = bad
        try:
            target_tick(oracle)
            assert False, f"Should reject {bad!r}"
        except OracleUnavailable as e:
            assert e.code == ErrorCode.ORACLE_INVALID_RESPONSE

    print("  target_tick: PASSED")


def main():
    """Run all tick math tests"""
    print("=" * 60)
    print("Tick Math Unit Tests")
    print("=" * 60)

    tests = [
        test_get_sqrt_ratio_at_tick,
        test_get_tick_at_sqrt_ratio,
        test_align_tick,
        test_ticks_with_threshold,
        test_amounts_for_liquidity,
        test_liquidity_for_amounts,
        test_amounts_from_liquidity,
        test_price_to_tick,
        test_target_tick,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"  FAILED: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print("=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
