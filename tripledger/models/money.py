"""
Money Helpers

All ledger arithmetic happens on integers in MINOR units (cents).
Floats and decimal strings are only accepted at the boundary and are
converted exactly once, with ROUND_HALF_UP.

DESIGN DECISION: Equal splits use largest-remainder distribution.
The first ``amount % n`` participants carry one extra minor unit, so
the shares of an expense always add back up to its total.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from tripledger.errors import InvalidAmountError

AmountLike = Union[Decimal, float, int, str]


def to_decimal(value: AmountLike, field: str = "amount") -> Decimal:
    """Parse a boundary amount, rejecting anything non-finite."""
    if isinstance(value, bool):
        raise InvalidAmountError(f"Not an amount: {value!r}", field=field)
    try:
        # str() first so 0.1 stays 0.1 rather than its binary expansion
        parsed = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Not an amount: {value!r}", field=field)
    if not parsed.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}", field=field)
    return parsed


def to_minor_units(value: AmountLike, digits: int = 2, field: str = "amount") -> int:
    """
    Convert a major-unit amount to integer minor units.

    >>> to_minor_units("12.345")
    1235
    """
    quantum = Decimal(1).scaleb(-digits)
    major = to_decimal(value, field=field).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(major.scaleb(digits))


def from_minor_units(amount: int, digits: int = 2) -> Decimal:
    """Convert integer minor units back to a major-unit Decimal."""
    return Decimal(amount).scaleb(-digits)


def convert_currency(value: AmountLike, rate: AmountLike) -> Decimal:
    """
    Convert a foreign amount into the reference currency.

    The rate is supplied by the caller; fetching it is not our job.
    """
    parsed_rate = to_decimal(rate, field="exchange_rate")
    if parsed_rate <= 0:
        raise InvalidAmountError(
            f"Exchange rate must be positive, got {rate!r}",
            field="exchange_rate",
        )
    return to_decimal(value) * parsed_rate


def split_evenly(amount: int, parts: int) -> list[int]:
    """
    Split ``amount`` minor units into ``parts`` near-equal integer slots.

    >>> split_evenly(100, 3)
    [34, 33, 33]
    """
    if parts <= 0:
        raise ValueError("Cannot split between zero parts")
    base, remainder = divmod(amount, parts)
    return [base + 1 if i < remainder else base for i in range(parts)]


def format_minor(amount: int, currency: str = "HKD", digits: int = 2) -> str:
    """Human-readable amount, e.g. ``HKD 12.50``."""
    return f"{currency} {from_minor_units(amount, digits):,.{digits}f}"
