"""
Session spend ledger.

Tracks cumulative authorized value, in atomic units (10^6 per USDC),
against an optional budget. ``can_spend`` and ``record_spend`` are separate
calls: the check happens before the paid request is sent and the record
after it returns. Nothing locks the pair, so two operations racing on a
nearly exhausted budget can both pass the check and overshoot by up to one
operation's cost.
"""

from decimal import ROUND_DOWN, ROUND_FLOOR, Decimal, InvalidOperation
from typing import Optional, Union

from .exceptions import ConfigError
from ..schemas.results import SpendStatus
from ..utils import logger


ATOMIC_SCALE = 10 ** 6
UNLIMITED = "unlimited"

AtomicAmount = Union[int, str]


def to_atomic(amount: AtomicAmount) -> int:
    """
    Normalize an atomic amount given as ``int`` or decimal-digit string.

    Raises:
        ValueError: If the amount is negative or not an integer.
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid atomic amount: {amount!r}")
    if isinstance(amount, str):
        digits = amount.strip()
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"Invalid atomic amount: {amount!r}")
        amount = int(digits)
    if not isinstance(amount, int) or amount < 0:
        raise ValueError(f"Invalid atomic amount: {amount!r}")
    return amount


def decimal_to_atomic(amount: str) -> int:
    """
    Convert a decimal USDC string to atomic units, truncating (floor).

    ``"0.0000001"`` becomes ``0``.

    Raises:
        ConfigError: If the value is non-numeric, not finite, or negative.
    """
    try:
        parsed = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ConfigError(f"Spend limit must be a number, got {amount!r}") from exc
    if not parsed.is_finite():
        raise ConfigError(f"Spend limit must be finite, got {amount!r}")
    if parsed < 0:
        raise ConfigError(f"Spend limit must be non-negative, got {amount!r}")
    return int((parsed * ATOMIC_SCALE).to_integral_value(rounding=ROUND_FLOOR))


def format_atomic(amount: int) -> str:
    """Render atomic units as a 2-decimal string, truncating: 12345 -> ``"0.01"``."""
    value = (Decimal(amount) / ATOMIC_SCALE).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
    return f"{value:.2f}"


class SpendLedger:
    """
    Per-session accounting of authorized spend.

    Example::

        ledger = SpendLedger()
        ledger.set_limit("0.05")
        if ledger.can_spend(10000):
            ...  # pay
            ledger.record_spend(10000)
        ledger.get_status().remaining   # "0.04"
    """

    def __init__(self, limit: Optional[str] = None) -> None:
        self._limit_atomic: Optional[int] = None
        self._spent_atomic = 0
        self._call_count = 0
        if limit is not None:
            self.set_limit(limit)

    @property
    def limit_atomic(self) -> Optional[int]:
        return self._limit_atomic

    @property
    def spent_atomic(self) -> int:
        return self._spent_atomic

    @property
    def call_count(self) -> int:
        return self._call_count

    @property
    def is_limited(self) -> bool:
        return self._limit_atomic is not None

    @property
    def remaining_atomic(self) -> Optional[int]:
        if self._limit_atomic is None:
            return None
        return max(self._limit_atomic - self._spent_atomic, 0)

    def set_limit(self, amount: str) -> None:
        """Set the session budget from a decimal USDC string."""
        self._limit_atomic = decimal_to_atomic(amount)
        logger.info(f"Spend limit set to {format_atomic(self._limit_atomic)} USDC")

    def clear_limit(self) -> None:
        """Remove the budget; spent and call count are kept."""
        self._limit_atomic = None

    def can_spend(self, amount_atomic: AtomicAmount) -> bool:
        if self._limit_atomic is None:
            return True
        return self._spent_atomic + to_atomic(amount_atomic) <= self._limit_atomic

    def record_spend(self, amount_atomic: AtomicAmount) -> None:
        """
        Add ``amount_atomic`` to the running total.

        Does not check the limit; callers check ``can_spend`` before paying.
        """
        self._spent_atomic += to_atomic(amount_atomic)
        self._call_count += 1

    def get_status(self) -> SpendStatus:
        limited = self._limit_atomic is not None
        return SpendStatus(
            max_budget=format_atomic(self._limit_atomic) if limited else UNLIMITED,
            spent=format_atomic(self._spent_atomic),
            remaining=format_atomic(self.remaining_atomic) if limited else UNLIMITED,
            call_count=self._call_count,
            is_limited=limited,
        )

    def reset(self) -> None:
        """Zero spent and call count. The limit stays."""
        self._spent_atomic = 0
        self._call_count = 0
