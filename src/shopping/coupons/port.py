"""Coupon validator port (abstract interface).

The coupon authority evaluates the business rules (minimum purchase,
category restrictions, expiry, usage limits) remotely. The cart only
receives a verdict and, when valid, the discount to apply.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ValidatedCoupon:
    """A coupon confirmed by the authority for a given cart total."""

    id: str
    code: str
    type: str  # "percentage" or "fixed"
    value: float
    discount: float
    final_total: float


@dataclass(frozen=True)
class CouponValidation:
    """Verdict of a coupon validation request."""

    valid: bool
    coupon: ValidatedCoupon | None = None
    error: str | None = None


@dataclass(frozen=True)
class ActiveCoupon:
    """Publicly advertised coupon terms."""

    code: str
    type: str
    value: float
    min_purchase: float | None = None
    max_discount: float | None = None


class CouponValidator(ABC):
    """Abstract coupon validator interface."""

    @abstractmethod
    async def validate(self, code: str, total: float, items: list[dict]) -> CouponValidation:
        """Validate `code` against a cart total and its item summaries."""
        ...

    @abstractmethod
    async def active_coupons(self) -> list[ActiveCoupon]:
        """List coupons currently open to shoppers."""
        ...
