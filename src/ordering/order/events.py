"""Domain events for the Order aggregate.

Events are versioned, immutable facts. ``OrderPlaced`` is the hand-off point
for notifications; ``OrderStatusChanged`` records every staff status change,
including the ones that move the order backwards.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer order was accepted and persisted in ``pending``."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_name = String(required=True)
    customer_phone = String(required=True)
    customer_email = String(max_length=320)
    ordered_via = String(required=True)
    payment_method = String(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    delivery_fee = Float()
    total = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """Staff moved an order to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    is_backwards = Boolean(default=False)
    changed_by = String()
    changed_at = DateTime(required=True)
