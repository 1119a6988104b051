"""
Money helpers — conversion between Decimal amounts and stored integer cents.

Balances and transfer amounts are stored as integer cents (e.g. 10.50 is
stored as 1050). Integers are exact on every backend; SQLite keeps
Numeric columns as floating point, which cannot hold 18 significant digits.

The public API still speaks two-place Decimals, so the models expose
Decimal properties backed by these conversions.

Range: at most 18 digits (16 before the decimal point, 2 after), which
fits a signed 64-bit integer column with room to spare.
"""

from decimal import Decimal

CENT = Decimal("0.01")

MAX_DIGITS = 18
MAX_CENTS = 10**MAX_DIGITS - 1


def to_cents(value: Decimal) -> int:
    """
    Convert a Decimal amount to integer cents.

    Raises:
        ValueError: If the value has more than two fractional digits or
            is outside the storable range.
    """
    cents = Decimal(value).scaleb(2)
    if cents != cents.to_integral_value():
        raise ValueError(f"{value} has more than two decimal places")
    cents = int(cents)
    if abs(cents) > MAX_CENTS:
        raise ValueError(f"{value} exceeds {MAX_DIGITS} digits")
    return cents


def from_cents(cents: int) -> Decimal:
    return Decimal(cents).scaleb(-2)


def fits(cents: int) -> bool:
    """True if a cent value can be stored as a balance."""
    return abs(cents) <= MAX_CENTS
