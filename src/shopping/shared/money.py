"""Currency helpers.

Amounts inside the domain are integer minor units (cents). Decimal currency
amounts (floats) only exist at the boundaries: persisted records, API
payloads, domain events and the coupon authority.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def to_cents(amount) -> int:
    """Convert a currency amount to integer cents, rounding half up."""
    if amount is None:
        return 0
    value = Decimal(str(amount))
    if not value.is_finite():
        raise InvalidOperation(f"Not a currency amount: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> float:
    """Convert integer cents to a two-decimal currency amount."""
    return cents / 100


def round_currency(amount) -> float:
    """Round a currency amount to two decimals (`round(x * 100) / 100`)."""
    return from_cents(to_cents(amount))


def percent_of(cents: int, percent: int) -> int:
    """Return `percent`% of a non-negative amount in cents, rounded half up."""
    return (cents * percent + 50) // 100
