"""Cart pricing engine.

A pure function of the line items and the bound coupon discount. It never
reads or writes cart state itself; the aggregate assigns its result.

Algorithm (all amounts in cents):

1. subtotal = sum of unit price x quantity
2. discount is clamped to [0, subtotal]
3. tax = 23% of the discounted subtotal, rounded half up
4. shipping is free for an empty cart or a pre-discount subtotal of at
   least 39.00, otherwise a flat 5.99
5. total = discounted subtotal + tax + shipping
"""

from collections.abc import Iterable
from dataclasses import dataclass

from shopping.shared.money import percent_of

VAT_RATE_PERCENT = 23
FREE_SHIPPING_THRESHOLD = 3900
FLAT_SHIPPING_COST = 599


@dataclass(frozen=True)
class CartTotals:
    """Derived monetary totals of a cart, in cents."""

    subtotal: int = 0
    discount: int = 0
    tax: int = 0
    shipping: int = 0
    total: int = 0


def shipping_for(subtotal: int) -> int:
    # Evaluated on the pre-discount subtotal: a coupon never costs the
    # shopper free shipping.
    if subtotal == 0 or subtotal >= FREE_SHIPPING_THRESHOLD:
        return 0
    return FLAT_SHIPPING_COST


def calculate_totals(items: Iterable, coupon_discount: int = 0) -> CartTotals:
    """Compute totals for `items` (objects with `unit_price` and `quantity`)."""
    subtotal = sum((item.unit_price or 0) * item.quantity for item in items)
    discount = min(max(coupon_discount or 0, 0), subtotal)
    after_discount = subtotal - discount
    tax = percent_of(after_discount, VAT_RATE_PERCENT)
    shipping = shipping_for(subtotal)

    return CartTotals(
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        shipping=shipping,
        total=after_discount + tax + shipping,
    )
