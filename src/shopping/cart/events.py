"""Domain events for the ShoppingCart aggregate.

Monetary fields are currency amounts, not cents.
"""

from protean.fields import Float, Identifier, Integer, String

from shopping.domain import shopping


@shopping.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity accumulated."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@shopping.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a line item was replaced."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@shopping.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line item was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@shopping.event(part_of="ShoppingCart")
class CartCleared:
    """All line items and the coupon binding were discarded."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed_count = Integer(required=True)


@shopping.event(part_of="ShoppingCart")
class CartCouponApplied:
    """A remotely validated coupon was bound to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount = Float(required=True)


@shopping.event(part_of="ShoppingCart")
class CartCouponRemoved:
    """The coupon binding was removed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
