"""Coupon validator factory.

Provides get_coupon_validator() / set_coupon_validator() to swap implementations:
- FakeCouponValidator for development and testing
- HttpCouponValidator when COUPON_API_URL is configured
"""

from shopping.config import get_settings
from shopping.coupons.fake_adapter import FakeCouponValidator
from shopping.coupons.http_adapter import HttpCouponValidator
from shopping.coupons.port import CouponValidator

_current_validator: CouponValidator | None = None


def get_coupon_validator() -> CouponValidator:
    """Return the current coupon validator, creating the configured default."""
    global _current_validator
    if _current_validator is None:
        settings = get_settings()
        if settings.coupon_api_url:
            _current_validator = HttpCouponValidator(settings.coupon_api_url, timeout=settings.coupon_api_timeout)
        else:
            _current_validator = FakeCouponValidator()
    return _current_validator


def set_coupon_validator(validator: CouponValidator) -> None:
    """Override the active coupon validator (useful for tests)."""
    global _current_validator
    _current_validator = validator


def reset_coupon_validator() -> None:
    """Reset to the configured default validator."""
    global _current_validator
    _current_validator = None
