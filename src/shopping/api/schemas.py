"""Pydantic request/response schemas for the Cart API.

These are external contracts (anti-corruption layer) — separate from the
ShoppingCart aggregate. Cart responses reuse the cart's boundary state.
"""

from pydantic import BaseModel, Field

from shopping.cart.schemas import CartState


class ProductSchema(BaseModel):
    id: str
    name: str
    price: float = Field(ge=0)
    category: str | None = None
    image: str | None = None


class AddItemRequest(BaseModel):
    product: ProductSchema
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product": {
                        "id": "123e4567-e89b-12d3-a456-426614174000",
                        "name": "Unicorn Birthday Cake",
                        "price": 24.9,
                        "category": "cakes",
                    },
                    "quantity": 1,
                }
            ]
        }
    }


class UpdateQuantityRequest(BaseModel):
    # Zero or less removes the item
    quantity: int


class ApplyCouponRequest(BaseModel):
    code: str


class ApplyCouponResponse(BaseModel):
    applied: bool
    reason: str | None = None
    message: str | None = None
    cart: CartState


class ActiveCouponSchema(BaseModel):
    code: str
    type: str
    value: float
    min_purchase: float | None = None
    max_discount: float | None = None


class ActiveCouponsResponse(BaseModel):
    coupons: list[ActiveCouponSchema]
