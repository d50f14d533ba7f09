# accounting/services/money.py

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.exceptions import LedgerValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

# Debits and credits agree when they differ by less than one cent
BALANCE_TOLERANCE = Decimal("0.01")


def money(value) -> Decimal:
    """Parse a user/DB value into a 2dp Decimal (None/"" -> 0.00)."""
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise LedgerValidationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise LedgerValidationError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def positive_money(value, *, field: str = "amount") -> Decimal:
    amt = money(value)
    if amt <= ZERO:
        raise LedgerValidationError(f"{field} must be > 0")
    return amt
