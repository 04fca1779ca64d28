"""
Test In-Memory Venue

Tests for InMemoryPool and the static oracles.
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

OWNER = "0x" + "ab" * 20
RECIPIENT = "0x" + "cd" * 20
Q96 = 2 ** 96


def test_pool_price():
    """Test price state and setters"""
    from tranche_manager.protocols.memory import InMemoryPool
    from tranche_manager.math.tick_math import get_sqrt_ratio_at_tick
    from tranche_manager.errors import VenueError

    print("Testing InMemoryPool price...")

    pool = InMemoryPool(tick_spacing=60)
    assert pool.slot0() == (Q96, 0)
    assert pool.tick_spacing == 60
    assert pool.current_tick() == 0

    pool.set_tick(-1200)
    assert pool.slot0() == (get_sqrt_ratio_at_tick(-1200), -1200)

    pool.set_sqrt_price(get_sqrt_ratio_at_tick(300) + 5)
    assert pool.current_tick() == 300

    pool = InMemoryPool(tick_spacing=10, sqrt_price_x96=get_sqrt_ratio_at_tick(-7) - 1)
    assert pool.current_tick() == -8

    try:
        InMemoryPool(tick_spacing=0)
        assert False, "Zero spacing should be rejected"
    except VenueError:
        pass

    print("  InMemoryPool price: PASSED")


def test_pool_mint_burn_collect():
    """Test liquidity lifecycle and rounding direction"""
    from tranche_manager.protocols.memory import InMemoryPool
    from tranche_manager.types import compute_position_id

    print("Testing InMemoryPool mint/burn/collect...")

    pool = InMemoryPool(tick_spacing=60)
    paid0, paid1 = pool.mint(OWNER, -600, 600, 10 ** 18)
    assert paid0 > 0 and paid1 > 0
    assert pool.balances() == (paid0, paid1)

    position_id = compute_position_id(OWNER, -600, 600)
    assert pool.position(position_id).liquidity == 10 ** 18

    owed0, owed1 = pool.burn(OWNER, -600, 600, 10 ** 18)
    # Burn rounds down, mint rounds up
    assert owed0 <= paid0 and owed1 <= paid1
    assert paid0 - owed0 <= 1 and paid1 - owed1 <= 1

    position = pool.position(position_id)
    assert position.liquidity == 0
    assert (position.tokens_owed0, position.tokens_owed1) == (owed0, owed1)

    # Collect is capped at what is owed
    got0, got1 = pool.collect(OWNER, RECIPIENT, -600, 600, 2 ** 128 - 1, 2 ** 128 - 1)
    assert (got0, got1) == (owed0, owed1)
    assert pool.paid_to(RECIPIENT) == (owed0, owed1)
    assert pool.balances() == (paid0 - owed0, paid1 - owed1)

    # Returned position is a copy
    copy = pool.position(position_id)
    copy.liquidity = 99
    assert pool.position(position_id).liquidity == 0

    print("  InMemoryPool mint/burn/collect: PASSED")


def test_pool_out_of_range_amounts():
    """Test single-sided amounts outside the range"""
    from tranche_manager.protocols.memory import InMemoryPool

    print("Testing InMemoryPool out-of-range mint...")

    pool = InMemoryPool(tick_spacing=60, tick=1200)
    paid0, paid1 = pool.mint(OWNER, -600, 600, 10 ** 18)
    assert paid0 == 0 and paid1 > 0, "Price above range needs only token1"

    pool.set_tick(-1200)
    paid0, paid1 = pool.mint(OWNER, -600, 600, 10 ** 18)
    assert paid0 > 0 and paid1 == 0, "Price below range needs only token0"

    print("  InMemoryPool out-of-range mint: PASSED")


def test_pool_rejects_bad_calls():
    """Test validation of venue calls"""
    from tranche_manager.protocols.memory import InMemoryPool
    from tranche_manager.errors import VenueError, PositionStateError, ValidationError

    print("Testing InMemoryPool validation...")

    pool = InMemoryPool(tick_spacing=60)

    for lower, upper in ((600, -600), (-610, 600), (-600, 600 + 888000)):
        try:
            pool.mint(OWNER, lower, upper, 100)
            assert False, f"Range [{lower}, {upper}] should be rejected"
        except VenueError:
            pass

    try:
        pool.mint(OWNER, -600, 600, 0)
        assert False, "Zero liquidity should be rejected"
    except ValidationError:
        pass

    try:
        pool.burn(OWNER, -600, 600, 1)
        assert False, "Unknown position should be rejected"
    except PositionStateError:
        pass

    pool.mint(OWNER, -600, 600, 100)
    try:
        pool.burn(OWNER, -600, 600, 101)
        assert False, "Over-burn should be rejected"
    except VenueError:
        pass

    print("  InMemoryPool validation: PASSED")


def test_pool_fees_and_rollback():
    """Test fee accrual and checkpoint/rollback"""
    from tranche_manager.protocols.memory import InMemoryPool
    from tranche_manager.types import compute_position_id

    print("Testing InMemoryPool fees and rollback...")

    pool = InMemoryPool(tick_spacing=60)
    pool.mint(OWNER, -600, 600, 10 ** 18)
    position_id = compute_position_id(OWNER, -600, 600)

    checkpoint = pool.checkpoint()
    balances = pool.balances()

    pool.accrue_fees(OWNER, -600, 600, 1000, 2000)
    position = pool.position(position_id)
    assert (position.tokens_owed0, position.tokens_owed1) == (1000, 2000)

    pool.burn(OWNER, -600, 600, 10 ** 17)
    pool.mint(OWNER, -1200, 1200, 10 ** 18)
    pool.set_tick(600)

    pool.rollback(checkpoint)
    assert pool.balances() == balances
    assert pool.slot0()[1] == 0
    assert pool.position(position_id).liquidity == 10 ** 18
    assert pool.position(position_id).tokens_owed0 == 0
    assert not pool.has_position(compute_position_id(OWNER, -1200, 1200))

    # Checkpoint is unaffected by later mutation
    pool.burn(OWNER, -600, 600, 10 ** 18)
    pool.rollback(checkpoint)
    assert pool.position(position_id).liquidity == 10 ** 18

    print("  InMemoryPool fees and rollback: PASSED")


def test_pool_price_move_settles_balances():
    """Test that a price move swaps tokens in and out of the pool"""
    from tranche_manager.protocols.memory import InMemoryPool

    print("Testing InMemoryPool price move settlement...")

    pool = InMemoryPool(tick_spacing=60)
    narrow0, narrow1 = pool.mint(OWNER, -600, 600, 10 ** 18)
    wide0, wide1 = pool.mint(OWNER, -1200, 1200, 10 ** 18)
    start = pool.balances()
    assert start == (narrow0 + wide0, narrow1 + wide1)

    # Above the narrow range: its token0 has been swapped out for token1
    pool.set_tick(900)
    balance0, balance1 = pool.balances()
    assert balance0 < start[0] and balance1 > start[1]
    assert balance0 >= start[0] - narrow0 - wide0

    # Moving back reverses the swap exactly
    pool.set_tick(0)
    assert pool.balances() == start

    # Every position can be burned and collected in full at the new price
    pool.set_tick(900)
    for lower, upper in ((-600, 600), (-1200, 1200)):
        owed0, owed1 = pool.burn(OWNER, lower, upper, 10 ** 18)
        got = pool.collect(OWNER, RECIPIENT, lower, upper, owed0, owed1)
        assert got == (owed0, owed1)

    balance0, balance1 = pool.balances()
    assert balance0 >= 0 and balance1 >= 0
    assert pool.paid_to(RECIPIENT)[0] < start[0]

    print("  InMemoryPool price move settlement: PASSED")


def test_static_oracles():
    """Test StaticOracle and PoolTickOracle"""
    from tranche_manager.protocols.memory import InMemoryPool, StaticOracle, PoolTickOracle

    print("Testing static oracles...")

    oracle = StaticOracle(120)
    assert oracle.target_tick() == 120
    oracle.set_tick(-60)
    assert oracle.target_tick() == -60

    pool = InMemoryPool(tick_spacing=60, tick=345)
    assert PoolTickOracle(pool).target_tick() == 345

    print("  static oracles: PASSED")


def main():
    """Run all in-memory venue tests"""
    print("=" * 60)
    print("In-Memory Venue Tests")
    print("=" * 60)

    tests = [
        test_pool_price,
        test_pool_mint_burn_collect,
        test_pool_out_of_range_amounts,
        test_pool_rejects_bad_calls,
        test_pool_fees_and_rollback,
        test_pool_price_move_settles_balances,
        test_static_oracles,
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
