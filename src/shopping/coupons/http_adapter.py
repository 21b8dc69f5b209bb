"""HTTP coupon validator — talks to the storefront coupon service.

    GET {base_url}/api/coupons/validate?code=...&total=...&items=[...]
    GET {base_url}/api/coupons/active

Rejections arrive either as `{"valid": false, "error": ...}` with a 2xx
status or as an error status with the same body. Anything else (timeouts,
connection errors, unparsable bodies) is reported as an invalid coupon.
"""

import json

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from shopping.coupons.port import ActiveCoupon, CouponValidation, CouponValidator, ValidatedCoupon

logger = structlog.get_logger(__name__)

UNAVAILABLE_ERROR = "Could not validate the coupon. Please try again."


class _CouponPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)

    id: str
    code: str = Field(max_length=100)
    type: str
    value: float
    discount: float = Field(ge=0)
    final_total: float


class _ValidationPayload(BaseModel):
    valid: bool = False
    coupon: _CouponPayload | None = None
    error: str | None = None


class _ActiveCouponPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: str
    type: str
    value: float
    min_purchase: float | None = None
    max_discount: float | None = None


class HttpCouponValidator(CouponValidator):
    """Coupon validator backed by the remote coupon service."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def validate(self, code: str, total: float, items: list[dict]) -> CouponValidation:
        params = {"code": code, "total": total}
        if items:
            params["items"] = json.dumps(items)

        try:
            async with self._client() as client:
                response = await client.get("/api/coupons/validate", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Coupon validation request failed", coupon_code=code, error=str(exc))
            return CouponValidation(valid=False, error=UNAVAILABLE_ERROR)

        try:
            payload = _ValidationPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning(
                "Unreadable coupon validation response",
                coupon_code=code,
                status_code=response.status_code,
            )
            return CouponValidation(valid=False, error=UNAVAILABLE_ERROR)

        if not payload.valid or payload.coupon is None:
            return CouponValidation(valid=False, error=payload.error or "Invalid or expired coupon")

        coupon = payload.coupon
        return CouponValidation(
            valid=True,
            coupon=ValidatedCoupon(
                id=coupon.id,
                code=coupon.code,
                type=coupon.type,
                value=coupon.value,
                discount=coupon.discount,
                final_total=coupon.final_total,
            ),
        )

    async def active_coupons(self) -> list[ActiveCoupon]:
        try:
            async with self._client() as client:
                response = await client.get("/api/coupons/active")
            response.raise_for_status()
            coupons = [_ActiveCouponPayload.model_validate(c) for c in response.json().get("coupons", [])]
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.warning("Fetching active coupons failed", error=str(exc))
            return []

        return [
            ActiveCoupon(
                code=c.code,
                type=c.type,
                value=c.value,
                min_purchase=c.min_purchase,
                max_discount=c.max_discount,
            )
            for c in coupons
        ]
