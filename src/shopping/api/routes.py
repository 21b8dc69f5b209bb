"""FastAPI routes for the shopping cart.

Each client session (the `X-Cart-Session` header) owns one CartStore, which
is restored from storage the first time the session is seen. At most
`CART_MAX_SESSIONS` stores are kept in memory; the least recently used one
is dropped first and restored from storage on its next request.
"""

from collections import OrderedDict

from fastapi import APIRouter, Depends, Header

from shopping.api.schemas import (
    ActiveCouponSchema,
    ActiveCouponsResponse,
    AddItemRequest,
    ApplyCouponRequest,
    ApplyCouponResponse,
    UpdateQuantityRequest,
)
from shopping.cart.persistence import CartPersistence
from shopping.cart.product import Product
from shopping.cart.schemas import CartState
from shopping.cart.store import CartStore
from shopping.config import get_settings
from shopping.coupons import get_coupon_validator

DEFAULT_SESSION = "default"

_stores: OrderedDict[str, CartStore] = OrderedDict()


def get_cart_store(x_cart_session: str = Header(default=DEFAULT_SESSION)) -> CartStore:
    """Return the session's store, restoring it on first use."""
    settings = get_settings()

    store = _stores.get(x_cart_session)
    if store is not None:
        _stores.move_to_end(x_cart_session)
        return store

    key = settings.storage_key
    if x_cart_session != DEFAULT_SESSION:
        key = f"{key}-{x_cart_session}"
    store = CartStore.restore(persistence=CartPersistence(key=key))

    _stores[x_cart_session] = store
    while len(_stores) > max(settings.max_sessions, 1):
        _stores.popitem(last=False)
    return store


def reset_cart_stores() -> None:
    """Forget all session stores (useful for tests)."""
    _stores.clear()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartState)
async def get_cart(store: CartStore = Depends(get_cart_store)) -> CartState:
    return store.state()


@cart_router.post("/items", response_model=CartState)
async def add_cart_item(body: AddItemRequest, store: CartStore = Depends(get_cart_store)) -> CartState:
    store.add_item(Product(**body.product.model_dump()), body.quantity)
    return store.state()


@cart_router.put("/items/{product_id}", response_model=CartState)
async def update_cart_item_quantity(
    product_id: str,
    body: UpdateQuantityRequest,
    store: CartStore = Depends(get_cart_store),
) -> CartState:
    store.update_quantity(product_id, body.quantity)
    return store.state()


@cart_router.delete("/items/{product_id}", response_model=CartState)
async def remove_cart_item(product_id: str, store: CartStore = Depends(get_cart_store)) -> CartState:
    store.remove_item(product_id)
    return store.state()


@cart_router.delete("", response_model=CartState)
async def clear_cart(store: CartStore = Depends(get_cart_store)) -> CartState:
    store.clear_cart()
    return store.state()


@cart_router.post("/coupon", response_model=ApplyCouponResponse)
async def apply_cart_coupon(body: ApplyCouponRequest, store: CartStore = Depends(get_cart_store)) -> ApplyCouponResponse:
    applied = await store.apply_coupon(body.code)
    rejection = store.coupon_rejection
    return ApplyCouponResponse(
        applied=applied,
        reason=rejection.reason.value if rejection else None,
        message=rejection.message if rejection else None,
        cart=store.state(),
    )


@cart_router.delete("/coupon", response_model=CartState)
async def remove_cart_coupon(store: CartStore = Depends(get_cart_store)) -> CartState:
    store.remove_coupon()
    return store.state()


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.get("/active", response_model=ActiveCouponsResponse)
async def list_active_coupons() -> ActiveCouponsResponse:
    coupons = await get_coupon_validator().active_coupons()
    return ActiveCouponsResponse(
        coupons=[
            ActiveCouponSchema(
                code=c.code,
                type=c.type,
                value=c.value,
                min_purchase=c.min_purchase,
                max_discount=c.max_discount,
            )
            for c in coupons
        ]
    )
