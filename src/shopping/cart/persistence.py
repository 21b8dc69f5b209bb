"""Cart persistence — serialisation, migration and rehydration.

The record written to storage is

    {"state": {"items": [...], "total", "subtotal", "tax", "shipping",
               "couponCode", "couponDiscount"}, "version": 1}

Stored totals are informational only. Restoring never trusts them: line
items are checked one by one, then the pricing engine runs again.

Loading never raises. Unreadable, structurally broken or unknown-version
records are logged, deleted and replaced by an empty cart, so a broken cart
can never block the shopper.
"""

import json

import structlog
from protean.exceptions import ValidationError as DomainValidationError
from pydantic import ValidationError

from shopping.cart.cart import LineItem, ShoppingCart
from shopping.cart.identity import SchemaError, ensure_canonical_product_id
from shopping.cart.schemas import (
    CART_RECORD_VERSION,
    CartState,
    CouponBindingState,
    LineItemState,
    ProductSnapshotState,
    StoredCartRecord,
    StoredCartState,
)
from shopping.config import DEFAULT_STORAGE_KEY
from shopping.shared.money import from_cents, to_cents
from shopping.storage.port import CartStorage

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------
def cart_state(cart: ShoppingCart | None) -> CartState:
    """Boundary snapshot of a cart, in currency units."""
    if cart is None or cart.pricing is None:
        return CartState()

    pricing = cart.pricing
    return CartState(
        items=[
            LineItemState(
                product_id=str(item.product_id),
                quantity=item.quantity,
                product=ProductSnapshotState(
                    id=str(item.product_id),
                    name=item.name,
                    price=from_cents(item.unit_price or 0),
                    category=item.category,
                    image=item.image,
                ),
            )
            for item in cart.items
        ],
        subtotal=from_cents(pricing.subtotal),
        discount=from_cents(pricing.discount),
        tax=from_cents(pricing.tax),
        shipping=from_cents(pricing.shipping),
        total=from_cents(pricing.total),
        coupon_code=cart.coupon_code,
        # Clamped to the subtotal, like the discount the totals are priced with
        coupon_discount=from_cents(pricing.discount),
    )


def serialize_cart(cart: ShoppingCart) -> str:
    state = cart_state(cart).model_dump(by_alias=True, exclude={"discount"})
    return json.dumps({"state": state, "version": CART_RECORD_VERSION})


# ---------------------------------------------------------------------------
# Migrations
# ---------------------------------------------------------------------------
def _migrate_v0(state: dict) -> dict:
    """v0 records were written before coupons existed."""
    state.setdefault("couponCode", None)
    state.setdefault("couponDiscount", 0)
    return state


_MIGRATIONS = {
    0: _migrate_v0,
}


def migrate_state(state: dict, version: int) -> dict:
    """Upgrade a stored state, one version at a time, to the current version."""
    while version < CART_RECORD_VERSION:
        state = _MIGRATIONS[version](state)
        version += 1
    return state


# ---------------------------------------------------------------------------
# Rehydration
# ---------------------------------------------------------------------------
def _parse_item(raw) -> LineItemState | None:
    try:
        item = LineItemState.model_validate(raw)
        ensure_canonical_product_id(item.product_id)
    except SchemaError as exc:
        logger.warning("Dropping cart item with non-canonical product id", product_id=exc.product_id)
        return None
    except ValidationError as exc:
        logger.warning("Dropping malformed cart item", error_count=exc.error_count())
        return None
    return item


def _restore_items(cart: ShoppingCart, raw_items: list) -> int:
    """Add the surviving items to `cart` and return how many were dropped."""
    dropped = 0
    for raw in raw_items:
        item = _parse_item(raw)
        if item is None:
            dropped += 1
            continue

        existing = cart.find_item(item.product_id)
        if existing:
            existing.quantity += item.quantity
            continue

        product = item.product or ProductSnapshotState(id=item.product_id)
        try:
            line_item = LineItem(
                product_id=item.product_id,
                quantity=item.quantity,
                name=product.name,
                unit_price=to_cents(product.price),
                category=product.category,
                image=product.image,
            )
        except (DomainValidationError, ArithmeticError) as exc:
            logger.warning("Dropping cart item the cart cannot hold", product_id=item.product_id, error=str(exc))
            dropped += 1
            continue

        cart.add_items(line_item)
    return dropped


def _restore_coupon(cart: ShoppingCart, state: StoredCartState) -> None:
    code = state.coupon_code.strip() if isinstance(state.coupon_code, str) else state.coupon_code
    if not code:
        return

    try:
        binding = CouponBindingState(coupon_code=code, coupon_discount=state.coupon_discount or 0)
        discount = to_cents(binding.coupon_discount)
    except (ValidationError, ArithmeticError):
        logger.warning("Dropping invalid coupon binding", coupon_code=str(code)[:100])
        return

    cart.coupon_code = binding.coupon_code
    cart.coupon_discount = discount


def restore_cart(payload: str) -> ShoppingCart:
    """Rebuild a cart from a stored record.

    Raises ValueError when the record as a whole cannot be used.
    """
    record = StoredCartRecord.model_validate(json.loads(payload))
    if record.version > CART_RECORD_VERSION:
        raise ValueError(f"Unknown cart record version: {record.version}")

    state = StoredCartState.model_validate(migrate_state(dict(record.state), record.version))

    cart = ShoppingCart.create()
    dropped = _restore_items(cart, state.items)
    _restore_coupon(cart, state)
    cart.recalculate_pricing()

    logger.info(
        "Cart restored",
        items_count=len(cart.items),
        dropped_count=dropped,
        record_version=record.version,
    )
    return cart


class CartPersistence:
    """Loads and saves the cart record under a fixed storage key."""

    def __init__(self, storage: CartStorage | None = None, key: str = DEFAULT_STORAGE_KEY) -> None:
        if storage is None:
            from shopping.storage import get_storage

            storage = get_storage()
        self.storage = storage
        self.key = key

    def load(self) -> ShoppingCart | None:
        """Return the restored cart, an empty cart for a broken record, or None."""
        payload = self.storage.read(self.key)
        if payload is None:
            return None

        try:
            return restore_cart(payload)
        except (ValueError, ArithmeticError, DomainValidationError) as exc:
            # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
            logger.warning("Discarding unusable cart record", storage_key=self.key, error=str(exc))
            self.storage.delete(self.key)
            return ShoppingCart.create()

    def save(self, cart: ShoppingCart) -> bool:
        """Write the cart record. Best effort: failures are logged, never raised."""
        try:
            self.storage.write(self.key, serialize_cart(cart))
        except Exception as exc:
            logger.error("Saving cart failed", storage_key=self.key, error=str(exc))
            return False
        return True
