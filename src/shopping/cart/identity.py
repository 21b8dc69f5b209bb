"""Canonical product identifier checks used when rehydrating a cart.

Carts written before product identifiers were hardened may contain demo or
legacy ids. Restore drops such line items instead of trusting them.
"""

import re

CANONICAL_ID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


class SchemaError(ValueError):
    """A persisted line item does not carry a canonical product identifier."""

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Non-canonical product id: {product_id!r}")


def is_canonical_product_id(value) -> bool:
    """Lower-case, hyphenated 8-4-4-4-12 hex string."""
    return isinstance(value, str) and CANONICAL_ID_PATTERN.match(value) is not None


def ensure_canonical_product_id(value) -> str:
    if not is_canonical_product_id(value):
        raise SchemaError(value)
    return value
