"""
Two-Tranche Manager

Pools depositor capital into two concentric ranges around an oracle
target and issues fungible shares against the combined liquidity.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, List, Optional, Tuple, Union

from web3 import Web3

from .position_manager import PositionManager
from .scheduler import RebalancePhase, RebalanceScheduler
from ..config import config as global_config
from ..errors import LiquidityOverflow, PositionStateError, ValidationError
from ..infra import CorrelationContext, ShareLedger, log_with_correlation
from ..math.accounting import (
    cap_shares_by_value,
    check_deposit,
    liquidity_to_burn_pair,
    pro_rata,
    shares_to_mint,
)
from ..math.allocation import amount_from_ratio, split_by_ratio
from ..math.tick_math import (
    amounts_from_liquidity,
    amounts_value,
    liquidity_value,
    target_tick,
    ticks_with_threshold,
)
from ..protocols.base import PoolViewer, PriceOracle, VenuePool
from ..types import (
    MAX_UINT128,
    DepositEvent,
    DepositResult,
    ManagerParams,
    PositionRecord,
    RebalanceEvent,
    RebalanceResult,
    WithdrawEvent,
    WithdrawResult,
    is_null_address,
    normalize_address,
)

logger = logging.getLogger(__name__)

Event = Union[DepositEvent, WithdrawEvent, RebalanceEvent]


@dataclass
class ManagerState:
    """
    Mutable manager state

    Attributes:
        positions: Tranche 0 and tranche 1 ranges
        ratio1: Percentage of deposits routed to tranche 0
        ratio2: Percentage of deposits routed to tranche 1
        total_shares: Outstanding shares (mirrors the ledger supply)
        last_rebalance_time: Unix time of the last rebalance (0 = never)
        delay: Minimum seconds between rebalances
        reserve0: Idle token0 left over from rebalance re-deposits
        reserve1: Idle token1 left over from rebalance re-deposits
    """
    positions: Tuple[PositionRecord, PositionRecord]
    ratio1: int
    ratio2: int
    delay: int
    total_shares: int = 0
    last_rebalance_time: int = 0
    reserve0: int = 0
    reserve1: int = 0

    @property
    def total_liquidity(self) -> int:
        return self.positions[0].liquidity + self.positions[1].liquidity

    @property
    def liquidity(self) -> Tuple[int, int]:
        return (self.positions[0].liquidity, self.positions[1].liquidity)


def derive_manager_address(name: str, symbol: str) -> str:
    """Deterministic identity for a manager created without an address"""
    digest = Web3.to_hex(Web3.solidity_keccak(["string", "string"], [name, symbol]))
    return Web3.to_checksum_address("0x" + digest[-40:])


class TrancheManager:
    """
    Two-tranche concentrated liquidity manager

    Deposits are split by a fixed ratio across two ranges centred on the
    oracle target; shares are issued against the combined liquidity so
    ownership stays proportional however the liquidity is split.

    Every mutating operation runs under one lock as an all-or-nothing
    transaction over the manager state, the share ledger and the venue.
    Events are published only after the transaction commits.

    Usage:
        manager = TrancheManager(params, pool, oracle)
        result = manager.deposit(1000, alice)
        amount0, amount1 = manager.withdraw(result.shares, alice)
        manager.rebalance()
    """

    def __init__(
        self,
        params: ManagerParams,
        pool: VenuePool,
        oracle: PriceOracle,
        viewer: Optional[PoolViewer] = None,
        address: Optional[str] = None,
        ledger: Optional[ShareLedger] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize manager

        Args:
            params: Construction parameters (validated here)
            pool: Liquidity venue
            oracle: Target tick source
            viewer: Price source for amount conversion (defaults to the pool)
            address: Manager identity owning the venue positions
            ledger: Share ledger (created from params if None)
            clock: Unix time source for the rebalance cooldown

        Raises:
            ConfigurationError: If params violate any construction invariant
            OracleUnavailable: If the initial target tick cannot be read
        """
        self._pool = pool
        self._oracle = oracle
        self._viewer = viewer or pool
        self._tick_spacing = self._viewer.tick_spacing

        params.validate(self._tick_spacing)
        self._params = params

        self._address = normalize_address(address) if address else derive_manager_address(params.name, params.symbol)
        self._ledger = ledger or ShareLedger(params.name, params.symbol, global_config.manager.share_decimals)
        self._scheduler = RebalanceScheduler(params.effective_delay, clock)
        self._tranches = (
            PositionManager(pool, self._address, label="tranche 0"),
            PositionManager(pool, self._address, label="tranche 1"),
        )

        target = target_tick(oracle)
        records = tuple(
            PositionRecord.open(
                self._address,
                *ticks_with_threshold(target, threshold, self._tick_spacing),
                threshold=threshold,
            )
            for threshold in params.thresholds
        )
        self._state = ManagerState(
            positions=records,
            ratio1=params.ratio1,
            ratio2=params.ratio2,
            delay=params.effective_delay,
            total_shares=self._ledger.total_supply,
        )

        self._lock = threading.RLock()
        self._events: List[Event] = []
        self._listeners: List[Callable[[Event], None]] = []

        logger.info(
            f"{params.symbol} manager at {self._address}: target {target}, "
            f"ranges {[(r.tick_lower, r.tick_upper) for r in records]}, ratios {params.ratios}"
        )

    def __repr__(self) -> str:
        return f"TrancheManager({self._params.symbol}, shares={self._state.total_shares})"

    # ========== Properties ==========

    @property
    def address(self) -> str:
        return self._address

    @property
    def params(self) -> ManagerParams:
        return self._params

    @property
    def name(self) -> str:
        return self._ledger.name

    @property
    def symbol(self) -> str:
        return self._ledger.symbol

    @property
    def decimals(self) -> int:
        return self._ledger.decimals

    @property
    def tick_spacing(self) -> int:
        return self._tick_spacing

    @property
    def positions(self) -> Tuple[PositionRecord, PositionRecord]:
        """Copies of the two tranche records"""
        return tuple(copy.copy(record) for record in self._state.positions)

    @property
    def ratios(self) -> Tuple[int, int]:
        return (self._state.ratio1, self._state.ratio2)

    @property
    def total_liquidity(self) -> int:
        return self._state.total_liquidity

    @property
    def total_supply(self) -> int:
        return self._ledger.total_supply

    @property
    def reserves(self) -> Tuple[int, int]:
        return (self._state.reserve0, self._state.reserve1)

    @property
    def last_rebalance_time(self) -> int:
        return self._state.last_rebalance_time

    @property
    def delay(self) -> int:
        return self._state.delay

    @property
    def events(self) -> List[Event]:
        """Committed events, oldest first"""
        return list(self._events)

    def balance_of(self, holder: str) -> int:
        return self._ledger.balance_of(holder)

    def seconds_until_rebalance(self) -> int:
        return self._scheduler.seconds_until(self._state.last_rebalance_time)

    def rebalance_phase(self) -> RebalancePhase:
        return self._scheduler.phase(self._state.last_rebalance_time)

    @staticmethod
    def amount_from_ratio(amount: int, ratio: int) -> int:
        """amount * ratio // 100"""
        return amount_from_ratio(amount, ratio)

    # ========== Events ==========

    def subscribe(self, listener: Callable[[Event], None]) -> None:
        """Call `listener` with every event after its operation commits"""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Event], None]) -> None:
        self._listeners.remove(listener)

    def _publish(self, events: List[Event]) -> None:
        for event in events:
            self._events.append(event)
            for listener in list(self._listeners):
                listener(event)

    # ========== Transactions ==========

    @contextmanager
    def _transaction(self, operation: str):
        """
        All-or-nothing scope for one public operation

        Yields a list collecting events; they are published only if the
        body completes. Any exception restores the manager state, the
        ledger and the venue to their state at entry, then propagates.
        """
        pending: List[Event] = []
        with self._lock, CorrelationContext(operation):
            state_snapshot = copy.deepcopy(self._state)
            ledger_snapshot = self._ledger.snapshot()
            checkpoint = self._pool.checkpoint()
            try:
                yield pending
            except Exception as e:
                self._state = state_snapshot
                self._ledger.restore(ledger_snapshot)
                self._pool.rollback(checkpoint)
                log_with_correlation(logging.WARNING, f"rolled back: {e}", operation, log=logger)
                raise
            self._publish(pending)

    # ========== Deposit ==========

    def deposit(self, amount: int, recipient: str, sender: Optional[str] = None) -> DepositResult:
        """
        Deposit liquidity and mint shares

        The amount is split by the tranche ratios and supplied at each
        tranche's existing range. The part lost to floor division is not
        supplied and is reported as `unallocated`. Shares are priced on
        liquidity, capped at the deposit's share of the value already held
        so idle reserves are never handed to a new depositor.

        Args:
            amount: Liquidity units to deposit
            recipient: Receiver of the minted shares
            sender: Depositor recorded on the event (defaults to recipient)

        Returns:
            DepositResult with shares minted and per-tranche liquidity

        Raises:
            ValidationError: Null recipient, zero amount, or too small to mint shares
            LiquidityOverflow: Amount or resulting tranche liquidity above the ceiling
            PositionStateError: Shares outstanding with no liquidity behind them
            OracleUnavailable / VenueError: Collaborator failure
        """
        if is_null_address(recipient):
            raise ValidationError.null_recipient()
        if amount <= 0:
            raise ValidationError.zero_amount("amount")
        if amount >= MAX_UINT128:
            raise LiquidityOverflow.exceeds_ceiling("deposit amount", amount, MAX_UINT128 - 1)

        with self._transaction("deposit") as pending:
            state = self._state
            total_liquidity_before = state.total_liquidity
            total_shares_before = self._ledger.total_supply
            target = target_tick(self._oracle)

            parts = split_by_ratio(amount, state.ratio1, state.ratio2)
            deposited = parts[0] + parts[1]
            check_deposit(state.liquidity, parts)

            shares = shares_to_mint(deposited, total_liquidity_before, total_shares_before)
            if shares == 0:
                raise ValidationError.dust_deposit(amount)

            sqrt_price_x96 = self._viewer.sqrt_price_x96()
            value_before = self._holdings_value(sqrt_price_x96)

            paid0 = paid1 = 0
            for tranche, record, part in zip(self._tranches, state.positions, parts):
                if part == 0:
                    continue
                amount0, amount1 = tranche.supply(record, part)
                paid0 += amount0
                paid1 += amount1

            shares = cap_shares_by_value(
                shares, amounts_value(paid0, paid1, sqrt_price_x96), value_before, total_shares_before
            )
            if shares == 0:
                raise ValidationError.dust_deposit(amount)

            self._ledger.mint(recipient, shares)
            state.total_shares = self._ledger.total_supply

            log_with_correlation(
                logging.INFO,
                f"{amount} liquidity -> {parts} at target {target}, minted {shares} shares",
                "deposit",
                log=logger,
            )
            pending.append(DepositEvent(sender or recipient, recipient, amount))

        return DepositResult(
            shares=shares,
            liquidity=parts,
            amount0=paid0,
            amount1=paid1,
            unallocated=amount - deposited,
        )

    # ========== Withdraw ==========

    def withdraw(self, share_amount: int, recipient: str, owner: Optional[str] = None) -> WithdrawResult:
        """
        Burn shares and withdraw the proportional liquidity

        Each tranche gives up share_amount / total_shares of its own
        liquidity; idle reserves are paid out in the same proportion.

        Args:
            share_amount: Shares to burn
            recipient: Receiver of the withdrawn tokens
            owner: Holder whose shares are burned (defaults to recipient)

        Returns:
            WithdrawResult (unpacks to (amount0, amount1))

        Raises:
            ValidationError: Null recipient or zero share amount
            InsufficientFunds: Owner holds fewer shares
            LiquidityOverflow: Burn amount at or above the ceiling
            VenueError: Venue failure
        """
        if is_null_address(recipient):
            raise ValidationError.null_recipient()
        if share_amount <= 0:
            raise ValidationError.zero_amount("share_amount")

        owner = owner or recipient

        with self._transaction("withdraw") as pending:
            state = self._state
            total_shares = self._ledger.total_supply

            self._ledger.burn(owner, share_amount)
            burns = liquidity_to_burn_pair(share_amount, state.liquidity, total_shares)

            amount0 = amount1 = 0
            for tranche, record, burn in zip(self._tranches, state.positions, burns):
                if burn == 0:
                    continue
                got0, got1 = tranche.remove(record, burn, recipient)
                amount0 += got0
                amount1 += got1

            reserve0 = pro_rata(share_amount, state.reserve0, total_shares)
            reserve1 = pro_rata(share_amount, state.reserve1, total_shares)
            state.reserve0 -= reserve0
            state.reserve1 -= reserve1
            amount0 += reserve0
            amount1 += reserve1

            state.total_shares = self._ledger.total_supply

            log_with_correlation(
                logging.INFO,
                f"burned {share_amount}/{total_shares} shares, liquidity {burns}, paid ({amount0}, {amount1})",
                "withdraw",
                log=logger,
            )
            pending.append(WithdrawEvent(owner, recipient, share_amount))

        return WithdrawResult(amount0=amount0, amount1=amount1, liquidity=burns, shares=share_amount)

    # ========== Transfer ==========

    def transfer(self, sender: str, recipient: str, share_amount: int) -> None:
        """
        Move shares between holders

        Raises:
            ValidationError: Null recipient
            InsufficientFunds: Sender holds fewer shares
        """
        with self._transaction("transfer"):
            self._ledger.transfer(sender, recipient, share_amount)

    # ========== Rebalance ==========

    def rebalance(self, caller: Optional[str] = None) -> RebalanceResult:
        """
        Recentre both tranches on the current oracle target

        Each tranche is closed (principal and fees collected) and reopened
        at target +/- its threshold with what it collected. Idle reserves
        join tranche 0's budget; what tranche 0 cannot use joins tranche
        1's; what tranche 1 cannot use becomes the new reserve.

        Args:
            caller: Recorded on the Rebalance event

        Returns:
            RebalanceResult

        Raises:
            RebalanceCooldown: Called before `delay` elapsed (recoverable, no change)
            OracleUnavailable / VenueError: Collaborator failure
        """
        with self._transaction("rebalance") as pending:
            state = self._state
            target, timestamp, (reserve0, reserve1) = self._scheduler.run(
                state.last_rebalance_time, self._oracle, self._recentre
            )
            state.last_rebalance_time = timestamp
            state.reserve0 = reserve0
            state.reserve1 = reserve1

            pending.append(RebalanceEvent(caller, timestamp))

        return RebalanceResult(
            target_tick=target,
            timestamp=timestamp,
            ranges=tuple((r.tick_lower, r.tick_upper) for r in state.positions),
            liquidity=state.liquidity,
            reserve0=reserve0,
            reserve1=reserve1,
        )

    def _recentre(self, target: int) -> Tuple[int, int]:
        state = self._state
        sqrt_price_x96 = self._viewer.sqrt_price_x96()

        proceeds = [
            tranche.close(record, self._address)
            for tranche, record in zip(self._tranches, state.positions)
        ]

        carry0, carry1 = state.reserve0, state.reserve1
        records = []
        for tranche, record, (got0, got1) in zip(self._tranches, state.positions, proceeds):
            budget0 = got0 + carry0
            budget1 = got1 + carry1
            tick_lower, tick_upper = ticks_with_threshold(target, record.threshold, self._tick_spacing)
            new_record, used0, used1 = tranche.reopen(
                record.threshold, tick_lower, tick_upper, budget0, budget1, sqrt_price_x96
            )
            carry0 = budget0 - used0
            carry1 = budget1 - used1
            records.append(new_record)

            log_with_correlation(
                logging.INFO,
                f"{tranche.label}: [{record.tick_lower}, {record.tick_upper}] L={record.liquidity} -> "
                f"[{tick_lower}, {tick_upper}] L={new_record.liquidity}",
                "rebalance",
                log=logger,
            )

        state.positions = tuple(records)
        if state.total_shares > 0 and state.total_liquidity == 0:
            raise PositionStateError.unfunded_ranges(target, state.total_shares)
        return carry0, carry1

    # ========== Views ==========

    def _require_consistent(self) -> None:
        if self._state.total_shares != self._ledger.total_supply:
            raise PositionStateError(
                f"share supply {self._ledger.total_supply} != recorded {self._state.total_shares}"
            )

    def token_amounts_from_liquidity(self, liquidity: int) -> Tuple[int, int]:
        """
        Underlying amounts `liquidity` worth of shares would withdraw now

        Each tranche contributes liquidity * tranche.liquidity // total_shares,
        converted at the live price. (0, 0) when no shares exist.
        """
        total_shares = self._ledger.total_supply
        if total_shares == 0 or liquidity <= 0:
            return 0, 0

        sqrt_price_x96 = self._viewer.sqrt_price_x96()
        amount0 = amount1 = 0
        for record in self._state.positions:
            burn = liquidity * record.liquidity // total_shares
            part0, part1 = amounts_from_liquidity(record, burn, sqrt_price_x96)
            amount0 += part0
            amount1 += part1
        return amount0, amount1

    def token0_from_liquidity(self, liquidity: int) -> int:
        return self.token_amounts_from_liquidity(liquidity)[0]

    def token1_from_liquidity(self, liquidity: int) -> int:
        return self.token_amounts_from_liquidity(liquidity)[1]

    def _holdings_value(self, sqrt_price_x96: int) -> Fraction:
        """Exact value of both tranches plus reserves, in amounts_value units"""
        state = self._state
        value = Fraction(amounts_value(state.reserve0, state.reserve1, sqrt_price_x96))
        for record in state.positions:
            if record.liquidity:
                value += liquidity_value(record.tick_lower, record.tick_upper, record.liquidity, sqrt_price_x96)
        return value

    def total_amounts(self) -> Tuple[int, int]:
        """Underlying amounts of both tranches at the live price plus reserves"""
        sqrt_price_x96 = self._viewer.sqrt_price_x96()
        amount0, amount1 = self._state.reserve0, self._state.reserve1
        for record in self._state.positions:
            part0, part1 = amounts_from_liquidity(record, record.liquidity, sqrt_price_x96)
            amount0 += part0
            amount1 += part1
        return amount0, amount1

    def snapshot(self) -> dict:
        """JSON-serializable view of the manager state"""
        self._require_consistent()
        state = self._state
        return {
            "address": self._address,
            "symbol": self.symbol,
            "positions": [record.to_dict() for record in state.positions],
            "ratios": [state.ratio1, state.ratio2],
            "total_shares": state.total_shares,
            "total_liquidity": state.total_liquidity,
            "last_rebalance_time": state.last_rebalance_time,
            "delay": state.delay,
            "reserves": [state.reserve0, state.reserve1],
        }
