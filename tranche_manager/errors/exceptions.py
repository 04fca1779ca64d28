"""
Exception definitions for the tranche manager
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """
    Unified error codes for manager operations

    1xxx - Input validation errors
    2xxx - Liquidity representation errors
    3xxx - Timing errors
    4xxx - Venue errors
    5xxx - Oracle errors
    6xxx - Position / ledger errors
    9xxx - Configuration errors
    """
    # Input validation errors
    NULL_RECIPIENT = "1001"
    ZERO_AMOUNT = "1002"
    DUST_DEPOSIT = "1003"

    # Liquidity representation errors
    LIQUIDITY_OVERFLOW = "2001"

    # Timing errors (recoverable)
    REBALANCE_COOLDOWN = "3001"

    # Venue errors
    VENUE_CALL_FAILED = "4001"
    VENUE_INVALID_STATE = "4002"

    # Oracle errors
    ORACLE_UNAVAILABLE = "5001"
    ORACLE_INVALID_RESPONSE = "5002"

    # Position / ledger errors
    POSITION_NOT_FOUND = "6001"
    POSITION_UNBACKED = "6002"
    INSUFFICIENT_SHARES = "6003"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class TrancheManagerError(Exception):
    """
    Base exception for all tranche manager errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the operation might succeed if retried later
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation can be resubmitted unchanged later"""
        return self.recoverable


class ValidationError(TrancheManagerError):
    """
    Caller input rejected - not recoverable without corrected input

    Raised when:
    - Recipient is the null identity
    - Amount or share amount is zero
    - Deposit is too small to mint any shares
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ZERO_AMOUNT,
        field: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"field": field} if field else None,
        )
        self.field = field

    @classmethod
    def null_recipient(cls) -> "ValidationError":
        return cls("Recipient must not be the null address", ErrorCode.NULL_RECIPIENT, field="recipient")

    @classmethod
    def zero_amount(cls, field: str) -> "ValidationError":
        return cls(f"{field} must be greater than zero", ErrorCode.ZERO_AMOUNT, field=field)

    @classmethod
    def dust_deposit(cls, amount: int) -> "ValidationError":
        return cls(
            f"Deposit of {amount} liquidity is too small to mint any shares",
            ErrorCode.DUST_DEPOSIT,
            field="amount",
        )


class LiquidityOverflow(TrancheManagerError):
    """
    Liquidity amount exceeds what the venue can represent - not recoverable

    Raised when:
    - Deposit amount is at or above the uint128 ceiling
    - A tranche's liquidity would pass the ceiling after a deposit
    - A computed burn amount is at or above the ceiling
    """

    def __init__(
        self,
        message: str,
        value: Optional[int] = None,
        ceiling: Optional[int] = None,
    ):
        super().__init__(
            message,
            ErrorCode.LIQUIDITY_OVERFLOW,
            recoverable=False,
            details={"value": value, "ceiling": ceiling},
        )
        self.value = value
        self.ceiling = ceiling

    @classmethod
    def exceeds_ceiling(cls, what: str, value: int, ceiling: int) -> "LiquidityOverflow":
        return cls(
            f"{what} {value} exceeds the venue liquidity ceiling {ceiling}",
            value=value,
            ceiling=ceiling,
        )


class RebalanceCooldown(TrancheManagerError):
    """
    Rebalance attempted before the cooldown elapsed - recoverable later

    No state is changed when this is raised.
    """

    def __init__(
        self,
        message: str,
        elapsed: Optional[int] = None,
        delay: Optional[int] = None,
    ):
        super().__init__(
            message,
            ErrorCode.REBALANCE_COOLDOWN,
            recoverable=True,
            details={"elapsed": elapsed, "delay": delay},
        )
        self.elapsed = elapsed
        self.delay = delay

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds until the next rebalance becomes eligible"""
        if self.elapsed is None or self.delay is None:
            return None
        return max(0, self.delay - self.elapsed)

    @classmethod
    def not_elapsed(cls, elapsed: int, delay: int) -> "RebalanceCooldown":
        return cls(
            f"Rebalance cooldown not elapsed: {elapsed}s since last rebalance, delay is {delay}s",
            elapsed=elapsed,
            delay=delay,
        )


class VenueError(TrancheManagerError):
    """
    Liquidity venue call failed - not recoverable within the operation

    Raised when:
    - mint/burn/collect on the venue raises
    - The venue reports an inconsistent state
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VENUE_CALL_FAILED,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            original_error=original_error,
            details={"operation": operation} if operation else None,
        )
        self.operation = operation

    @classmethod
    def call_failed(cls, operation: str, error: Exception) -> "VenueError":
        return cls(
            f"Venue call '{operation}' failed: {error}",
            operation=operation,
            original_error=error,
        )

    @classmethod
    def invalid_state(cls, reason: str) -> "VenueError":
        return cls(f"Venue has invalid state: {reason}", ErrorCode.VENUE_INVALID_STATE)


class OracleUnavailable(TrancheManagerError):
    """
    Price oracle failed or answered nonsense - fatal, never retried

    Raised when:
    - The oracle source cannot be reached
    - The oracle response cannot be parsed into a tick
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.ORACLE_UNAVAILABLE,
        source: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            original_error=original_error,
            details={"source": source} if source else None,
        )
        self.source = source

    @classmethod
    def unreachable(cls, source: str, error: Exception) -> "OracleUnavailable":
        return cls(
            f"Price oracle unavailable ({source}): {error}",
            source=source,
            original_error=error,
        )

    @classmethod
    def invalid_response(cls, source: str, reason: str) -> "OracleUnavailable":
        return cls(
            f"Price oracle returned an invalid response ({source}): {reason}",
            ErrorCode.ORACLE_INVALID_RESPONSE,
            source=source,
        )


class InsufficientFunds(TrancheManagerError):
    """
    Share balance too low for a burn or transfer - not recoverable
    """

    def __init__(
        self,
        message: str,
        holder: Optional[str] = None,
        required: Optional[int] = None,
        available: Optional[int] = None,
    ):
        super().__init__(
            message,
            ErrorCode.INSUFFICIENT_SHARES,
            recoverable=False,
            details={
                "holder": holder,
                "required": required,
                "available": available,
            },
        )
        self.holder = holder
        self.required = required
        self.available = available

    @classmethod
    def share_balance(cls, holder: str, required: int, available: int) -> "InsufficientFunds":
        return cls(
            f"Insufficient share balance for {holder}: need {required}, have {available}",
            holder=holder,
            required=required,
            available=available,
        )


class PositionStateError(TrancheManagerError):
    """
    Position bookkeeping is inconsistent or a position is missing

    Raised when:
    - Shares are outstanding but no liquidity backs them
    - The venue has no position for the requested range
    """

    def __init__(
        self,
        message: str,
        position_id: Optional[str] = None,
        code: ErrorCode = ErrorCode.POSITION_UNBACKED,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"position_id": position_id},
        )
        self.position_id = position_id

    @classmethod
    def unbacked_shares(cls, total_shares: int) -> "PositionStateError":
        return cls(f"{total_shares} shares outstanding but no liquidity backs them")

    @classmethod
    def unfunded_ranges(cls, target_tick: int, total_shares: int) -> "PositionStateError":
        return cls(
            f"Recentring on tick {target_tick} funds neither tranche; "
            f"{total_shares} shares would be left without liquidity"
        )

    @classmethod
    def not_found(cls, position_id: str) -> "PositionStateError":
        return cls(
            f"Position not found: {position_id}",
            position_id=position_id,
            code=ErrorCode.POSITION_NOT_FOUND,
        )


class ConfigurationError(TrancheManagerError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Construction parameters are invalid (ratio sum, threshold bounds/alignment)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
