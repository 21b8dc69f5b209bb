"""Cart store — the shopper's cart and everything that happens to it.

A constructible state container around the ShoppingCart aggregate. Each
mutator changes the aggregate (which recomputes its totals as the last step
of the change) and then saves the cart through the persistence adapter.
Saving is best effort and never fails a mutation.

The only suspension point is the coupon authority round trip inside
`apply_coupon`. The cart is not touched until the verdict lands, so readers
during the await see the previous, fully derived state. A second
`apply_coupon` while one is in flight is rejected.

Nothing here raises for normal usage: coupon failures are reported as a
`False` return plus `coupon_rejection`.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ValidationError

from shopping.cart.cart import ShoppingCart
from shopping.cart.persistence import CartPersistence, cart_state
from shopping.cart.product import Product
from shopping.cart.schemas import CartState
from shopping.coupons import get_coupon_validator
from shopping.coupons.port import CouponValidator
from shopping.shared.money import from_cents, to_cents

logger = structlog.get_logger(__name__)


class CouponRejectionReason(Enum):
    BLANK_CODE = "blank_code"
    ALREADY_APPLIED = "already_applied"
    VALIDATION_PENDING = "validation_pending"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CouponRejection:
    """Why the last `apply_coupon` call returned False, with a display message."""

    reason: CouponRejectionReason
    message: str


class CartStore:
    def __init__(
        self,
        coupon_validator: CouponValidator | None = None,
        persistence: CartPersistence | None = None,
        cart: ShoppingCart | None = None,
    ) -> None:
        self.coupon_validator = coupon_validator or get_coupon_validator()
        self.persistence = persistence or CartPersistence()
        self.coupon_rejection: CouponRejection | None = None
        self._cart = cart
        self._coupon_pending = False

    @classmethod
    def restore(
        cls,
        coupon_validator: CouponValidator | None = None,
        persistence: CartPersistence | None = None,
    ) -> "CartStore":
        """Build a store from the persisted cart, if any."""
        persistence = persistence or CartPersistence()
        return cls(coupon_validator=coupon_validator, persistence=persistence, cart=persistence.load())

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def cart(self) -> ShoppingCart | None:
        return self._cart

    @property
    def coupon_pending(self) -> bool:
        return self._coupon_pending

    def state(self) -> CartState:
        return cart_state(self._cart)

    def item_summaries(self) -> list[dict]:
        return self._cart.item_summaries() if self._cart else []

    def checkout_items(self) -> list[dict]:
        """Line items in the shape the checkout session expects."""
        if self._cart is None:
            return []
        return [{"productId": str(item.product_id), "quantity": item.quantity} for item in self._cart.items]

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _ensure_cart(self) -> ShoppingCart:
        if self._cart is None:
            self._cart = ShoppingCart.create()
        return self._cart

    def _commit(self) -> None:
        pricing = self._cart.pricing
        logger.debug(
            "Cart updated",
            items_count=len(self._cart.items),
            subtotal=from_cents(pricing.subtotal),
            total=from_cents(pricing.total),
        )
        self.persistence.save(self._cart)

    def _reject(self, reason: CouponRejectionReason, message: str) -> bool:
        self.coupon_rejection = CouponRejection(reason=reason, message=message)
        logger.info("Coupon not applied", reason=reason.value, message=message)
        return False

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product: Product, quantity: int = 1) -> None:
        cart = self._ensure_cart()
        cart.add_item(
            product_id=product.id,
            quantity=quantity,
            name=product.name,
            unit_price=to_cents(product.price),
            category=product.category,
            image=product.image,
        )
        self._commit()

    def remove_item(self, product_id: str) -> None:
        self._ensure_cart().remove_item(product_id)
        self._commit()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return

        self._ensure_cart().update_quantity(product_id, quantity)
        self._commit()

    def clear_cart(self) -> None:
        self._ensure_cart().clear()
        self._commit()

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    async def apply_coupon(self, code: str) -> bool:
        """Validate `code` with the coupon authority and bind it on success."""
        self.coupon_rejection = None

        code = (code or "").strip().upper()
        if not code:
            return self._reject(CouponRejectionReason.BLANK_CODE, "Please enter a coupon code")
        if self._cart is not None and self._cart.has_coupon:
            return self._reject(CouponRejectionReason.ALREADY_APPLIED, "Remove the existing coupon first")
        if self._coupon_pending:
            return self._reject(CouponRejectionReason.VALIDATION_PENDING, "A coupon is already being validated")

        cart = self._ensure_cart()
        self._coupon_pending = True
        try:
            validation = await self.coupon_validator.validate(
                code,
                from_cents(cart.pricing.subtotal),
                cart.item_summaries(),
            )
        except Exception:
            logger.exception("Coupon validator failed", coupon_code=code)
            return self._reject(CouponRejectionReason.UNAVAILABLE, "Could not validate the coupon. Please try again.")
        finally:
            self._coupon_pending = False

        if not validation.valid or validation.coupon is None:
            return self._reject(CouponRejectionReason.REJECTED, validation.error or "Invalid or expired coupon")

        coupon = validation.coupon
        try:
            cart.bind_coupon(coupon.code or code, to_cents(coupon.discount))
        except (ValidationError, ArithmeticError) as exc:
            logger.warning("Coupon verdict cannot be bound", coupon_code=code, error=str(exc))
            return self._reject(CouponRejectionReason.REJECTED, "Invalid or expired coupon")

        logger.info("Coupon applied", coupon_code=cart.coupon_code, discount=coupon.discount)
        self._commit()
        return True

    def remove_coupon(self) -> None:
        self._ensure_cart().remove_coupon()
        self._commit()
