"""Shopping bounded context — client-resident Shopping Cart.

Holds the shopper's intended purchase, derives monetary totals on every
mutation, binds remotely validated coupons and survives persistence/reload.
"""

import structlog
from protean.domain import Domain

shopping = Domain(name="shopping")

logger = structlog.get_logger(__name__)
