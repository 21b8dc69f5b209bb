"""Pydantic models for the cart's external representation.

The same shape is used for the persisted cart record and for API
responses. Amounts are currency units (two decimals), keys are camelCase.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CART_RECORD_VERSION = 1


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class ProductSnapshotState(_CamelModel):
    # Lengths follow the LineItem entity fields
    id: str
    name: str | None = Field(default=None, max_length=255)
    price: float = Field(default=0.0, ge=0)
    category: str | None = Field(default=None, max_length=100)
    image: str | None = Field(default=None, max_length=1000)


class LineItemState(_CamelModel):
    product_id: str = Field(max_length=255)
    quantity: int = Field(ge=1)
    product: ProductSnapshotState | None = None


class CartState(_CamelModel):
    items: list[LineItemState] = Field(default_factory=list)
    subtotal: float = 0.0
    discount: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    total: float = 0.0
    coupon_code: str | None = None
    coupon_discount: float = 0.0


class StoredCartState(_CamelModel):
    # Items and the coupon binding stay raw here so that a bad item or
    # binding is dropped on its own instead of invalidating the whole record.
    items: list[Any] = Field(default_factory=list)
    coupon_code: Any = None
    coupon_discount: Any = 0.0


class CouponBindingState(_CamelModel):
    coupon_code: str = Field(min_length=1, max_length=100)
    coupon_discount: float = Field(default=0.0, ge=0)


class StoredCartRecord(BaseModel):
    state: dict[str, Any]
    version: int = Field(default=0, ge=0)
