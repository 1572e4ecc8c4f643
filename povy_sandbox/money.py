"""
Conversion between API amounts and stored integer cents.

Balances and ledger amounts are stored as integer hundredths of the account
currency, so all arithmetic on them is exact. The API speaks plain decimal
numbers (10000, 40.5); these helpers sit at that boundary and are the only
place amounts are validated for shape.

Every amount and every balance is capped at MAX_CENTS (9,999,999,999,999.99).
That keeps sums of two values inside SQLite's 64-bit INTEGER, and keeps every
value at 15 significant digits or fewer, which a JSON float carries exactly.
"""

from decimal import Decimal, InvalidOperation

from povy_sandbox.exceptions import ValidationError

_CENT = Decimal("0.01")

MAX_CENTS = 10**15 - 1


def to_cents(
    value,
    *,
    message: str = "Invalid amount.",
    allow_zero: bool = False,
    allow_negative: bool = False,
) -> int:
    """
    Convert a decimal amount to integer cents.

    Raises:
        ValidationError: If the value is not a finite number, has more than
            two decimal places, exceeds MAX_CENTS in magnitude, or violates
            the sign constraints.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(message)

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            raise ValidationError(message)
        quantized = amount.quantize(_CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError(message)

    if amount != quantized:
        raise ValidationError(message)
    if amount < 0 and not allow_negative:
        raise ValidationError(message)
    if amount == 0 and not allow_zero:
        raise ValidationError(message)

    cents = int(quantized * 100)
    if abs(cents) > MAX_CENTS:
        raise ValidationError(message)
    return cents


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a decimal amount (e.g. 1050 -> 10.50)."""
    return (Decimal(cents) / 100).quantize(_CENT)
