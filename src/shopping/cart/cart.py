"""Shopping Cart aggregate — the shopper's intended purchase.

The cart is a plain (not event sourced) aggregate. Line items carry a
snapshot of the product taken when it was first added, so the cart can be
priced without the catalogue. Totals live in the `pricing` value object and
are only ever assigned from the pricing engine, as the last step of every
mutating method.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import HasMany, Identifier, Integer, String, ValueObject

from shopping.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from shopping.cart.pricing import calculate_totals
from shopping.domain import shopping
from shopping.shared.money import from_cents


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@shopping.value_object(part_of="ShoppingCart")
class CartPricing:
    """Derived totals of the cart in cents: subtotal, discount, tax, shipping, total."""

    subtotal = Integer(default=0)
    discount = Integer(default=0)
    tax = Integer(default=0)
    shipping = Integer(default=0)
    total = Integer(default=0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@shopping.entity(part_of="ShoppingCart")
class LineItem:
    """One product-and-quantity entry, with the product snapshot taken at add-time."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    name = String(max_length=255)
    unit_price = Integer(default=0, min_value=0)  # cents
    category = String(max_length=100)
    image = String(max_length=1000)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@shopping.aggregate
class ShoppingCart:
    items = HasMany(LineItem)
    coupon_code = String(max_length=100)
    coupon_discount = Integer(default=0, min_value=0)  # cents, as confirmed by the coupon authority
    pricing = ValueObject(CartPricing)

    @invariant.post
    def one_line_item_per_product(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can only appear once in the cart"]})

    @invariant.post
    def total_must_not_be_negative(self):
        if self.pricing and self.pricing.total < 0:
            raise ValidationError({"pricing": ["Cart total cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls):
        return cls(coupon_discount=0, pricing=CartPricing())

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def has_coupon(self):
        return bool(self.coupon_code)

    def item_summaries(self):
        """Line items as sent to the coupon authority: product id and category."""
        summaries = []
        for item in self.items:
            summary = {"productId": str(item.product_id)}
            if item.category:
                summary["category"] = item.category
            summaries.append(summary)
        return summaries

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def recalculate_pricing(self):
        """Derive totals from the current items and coupon binding."""
        totals = calculate_totals(self.items, self.coupon_discount)
        self.pricing = CartPricing(
            subtotal=totals.subtotal,
            discount=totals.discount,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, name=None, unit_price=0, category=None, image=None):
        """Add a product (or accumulate its quantity if already in the cart)."""
        existing = self.find_item(product_id)

        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
        else:
            self.add_items(
                LineItem(
                    product_id=product_id,
                    quantity=quantity,
                    name=name,
                    unit_price=unit_price,
                    category=category,
                    image=image,
                )
            )
            new_quantity = quantity

        self.recalculate_pricing()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove the line item for `product_id`. Absent products are ignored."""
        item = self.find_item(product_id)
        if item is None:
            return

        self.remove_items(item)
        self.recalculate_pricing()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )

    def update_quantity(self, product_id, quantity):
        """Replace the quantity of a line item; zero or less removes it."""
        if quantity <= 0:
            self.remove_item(product_id)
            return

        item = self.find_item(product_id)
        if item is None:
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self.recalculate_pricing()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def clear(self):
        """Empty the cart and drop the coupon binding."""
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)

        self.coupon_code = None
        self.coupon_discount = 0
        # Zero is the fixed point of the pricing engine for an empty cart
        self.pricing = CartPricing()

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed_count=len(removed),
            )
        )

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def bind_coupon(self, coupon_code, discount):
        """Bind a coupon already confirmed by the coupon authority."""
        if self.has_coupon:
            raise ValidationError({"coupon_code": ["A coupon is already applied"]})
        if not coupon_code or not coupon_code.strip():
            raise ValidationError({"coupon_code": ["Coupon code is required"]})

        self.coupon_code = coupon_code
        self.coupon_discount = max(discount, 0)
        self.recalculate_pricing()

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_code=coupon_code,
                discount=from_cents(self.coupon_discount),
            )
        )

    def remove_coupon(self):
        """Drop the coupon binding. Carts without a coupon are left untouched."""
        if not self.has_coupon:
            return

        coupon_code = self.coupon_code
        self.coupon_code = None
        self.coupon_discount = 0
        self.recalculate_pricing()

        self.raise_(
            CartCouponRemoved(
                cart_id=str(self.id),
                coupon_code=coupon_code,
            )
        )
