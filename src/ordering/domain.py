"""Ordering bounded context: storefront carts, checkout and the order lifecycle.

Handles the session cart, multi-channel checkout (cash on delivery, WhatsApp
hand-off and M-Pesa with manual confirmation), the order status workflow,
customer order tracking, and analytics derived from the order stream.
"""

import structlog
from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
