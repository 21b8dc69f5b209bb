"""Configurable in-process coupon authority for development and testing.

Evaluates the same rules as the remote coupon service against a local
coupon table, without any network call. Like the fake payment gateway it
records every call and can be switched into a failing mode that behaves
like an unreachable service.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from shopping.coupons.port import ActiveCoupon, CouponValidation, CouponValidator, ValidatedCoupon
from shopping.shared.money import from_cents, to_cents

UNAVAILABLE_ERROR = "Could not validate the coupon. Please try again."


@dataclass
class CouponRule:
    """A coupon definition as held by the coupon authority."""

    code: str
    type: str = "percentage"  # "percentage" or "fixed"
    value: float = 0.0
    min_purchase: float | None = None
    max_discount: float | None = None
    max_uses: int | None = None
    uses: int = 0
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    active: bool = True
    applicable_categories: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))

    def is_available(self, now: datetime) -> bool:
        if not self.active:
            return False
        if self.starts_at and self.starts_at > now:
            return False
        if self.ends_at and self.ends_at < now:
            return False
        return not (self.max_uses and self.uses >= self.max_uses)

    def discount_for(self, total: float) -> float:
        if self.type == "percentage":
            discount = total * self.value / 100
            if self.max_discount:
                discount = min(discount, self.max_discount)
        else:
            discount = self.value
        return from_cents(to_cents(discount))


class FakeCouponValidator(CouponValidator):
    """Rule-evaluating fake coupon authority."""

    def __init__(self, coupons: list[CouponRule] | None = None) -> None:
        self.coupons: dict[str, CouponRule] = {}
        self.should_fail: bool = False
        self.calls: list[dict] = []
        for coupon in coupons or []:
            self.add_coupon(coupon)

    def add_coupon(self, coupon: CouponRule) -> None:
        self.coupons[coupon.code.upper()] = coupon

    def configure(self, should_fail: bool) -> None:
        """Simulate an unreachable coupon service."""
        self.should_fail = should_fail

    async def validate(self, code: str, total: float, items: list[dict]) -> CouponValidation:
        self.calls.append({"method": "validate", "code": code, "total": total, "items": items})

        if self.should_fail:
            return CouponValidation(valid=False, error=UNAVAILABLE_ERROR)

        now = datetime.now(UTC)
        coupon = self.coupons.get(code.upper())
        if coupon is None or not coupon.active:
            return CouponValidation(valid=False, error="Invalid or expired coupon")
        if coupon.starts_at and coupon.starts_at > now:
            return CouponValidation(valid=False, error="Coupon is not active yet")
        if coupon.ends_at and coupon.ends_at < now:
            return CouponValidation(valid=False, error="Coupon has expired")
        if coupon.max_uses and coupon.uses >= coupon.max_uses:
            return CouponValidation(valid=False, error="Coupon usage limit reached")
        if coupon.min_purchase and total < coupon.min_purchase:
            return CouponValidation(
                valid=False,
                error=f"Minimum purchase: €{coupon.min_purchase:.2f}",
            )
        if coupon.applicable_categories and items:
            categories = {item.get("category") for item in items}
            if categories.isdisjoint(coupon.applicable_categories):
                return CouponValidation(valid=False, error="Coupon does not apply to these products")

        discount = coupon.discount_for(total)
        return CouponValidation(
            valid=True,
            coupon=ValidatedCoupon(
                id=coupon.id,
                code=coupon.code,
                type=coupon.type,
                value=coupon.value,
                discount=discount,
                final_total=from_cents(max(0, to_cents(total) - to_cents(discount))),
            ),
        )

    async def active_coupons(self) -> list[ActiveCoupon]:
        self.calls.append({"method": "active_coupons"})

        if self.should_fail:
            return []

        now = datetime.now(UTC)
        return [
            ActiveCoupon(
                code=coupon.code,
                type=coupon.type,
                value=coupon.value,
                min_purchase=coupon.min_purchase,
                max_discount=coupon.max_discount,
            )
            for coupon in self.coupons.values()
            if coupon.is_available(now)
        ]
