from uuid import uuid4

import pytest
from protean.integrations.pytest import DomainFixture
from shopping.cart.persistence import CartPersistence
from shopping.cart.product import Product
from shopping.cart.store import CartStore
from shopping.coupons import set_coupon_validator
from shopping.coupons.fake_adapter import CouponRule, FakeCouponValidator
from shopping.storage import set_storage
from shopping.storage.memory_adapter import MemoryCartStorage


@pytest.fixture(scope="session")
def shopping_bed():
    from shopping.domain import shopping

    bed = DomainFixture(shopping)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(shopping_bed):
    with shopping_bed.domain_context():
        yield


@pytest.fixture()
def storage():
    storage = MemoryCartStorage()
    set_storage(storage)
    return storage


@pytest.fixture()
def coupon_validator():
    validator = FakeCouponValidator(
        [
            CouponRule(code="SAVE5", type="fixed", value=5.0),
            CouponRule(code="PARTY10", type="percentage", value=10.0),
        ]
    )
    set_coupon_validator(validator)
    return validator


@pytest.fixture()
def persistence(storage):
    return CartPersistence(storage=storage)


@pytest.fixture()
def store(coupon_validator, persistence):
    return CartStore(coupon_validator=coupon_validator, persistence=persistence)


@pytest.fixture()
def make_product():
    def _make(price=10.99, category="cakes", name="Test Cake", product_id=None):
        return Product(
            id=product_id or str(uuid4()),
            name=name,
            price=price,
            category=category,
        )

    return _make
