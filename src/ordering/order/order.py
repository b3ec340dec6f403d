"""Order aggregate: a storefront order and its status workflow.

Orders are created by checkout in ``pending`` and moved through the status
workflow by staff only:

    pending → confirmed → dispatched → delivered
    (any) → cancelled

The transition graph is open: staff may set any status from any
status. Moves that go backwards (to a lower rank, or out of delivered or
cancelled) are allowed but logged and flagged on the emitted event.

Line items are snapshots frozen at order time and never recomputed from the
live catalogue.
"""

import time
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.settings import get_settings

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderChannel(Enum):
    WEBSITE = "website"
    WHATSAPP = "whatsapp"
    MPESA = "mpesa"


class PaymentMethod(Enum):
    COD = "cod"
    WHATSAPP = "whatsapp"
    MPESA = "mpesa"


# Forward progress rank; cancelled sits outside the happy path.
_STATUS_RANK = {
    OrderStatus.PENDING: 0,
    OrderStatus.CONFIRMED: 1,
    OrderStatus.DISPATCHED: 2,
    OrderStatus.DELIVERED: 3,
    OrderStatus.CANCELLED: 4,
}

_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Statuses that count as a completed sale in revenue reporting
SALE_STATUSES = frozenset({OrderStatus.CONFIRMED.value, OrderStatus.DISPATCHED.value, OrderStatus.DELIVERED.value})

ORDER_NUMBER_PREFIX = "KF-"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_order_number(timestamp_ms: int | None = None) -> str:
    """Human-readable order number: ``KF-`` + base36 millisecond timestamp."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{ORDER_NUMBER_PREFIX}{_to_base36(timestamp_ms).upper()}"


def is_backwards_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """True when a move regresses the workflow or leaves a terminal state."""
    if current == target:
        return False
    if current in _TERMINAL_STATES:
        return True
    return _STATUS_RANK[target] < _STATUS_RANK[current]


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Unknown order status '{value}'. Expected one of: {allowed}"]})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class MpesaDetails:
    """Buyer-transcribed M-Pesa confirmation, verified manually by staff."""

    code = String(max_length=12)
    phone = String(max_length=20)
    message = Text()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A line item snapshot: name, price and image as they were at checkout."""

    product_id = String(required=True, max_length=50)
    product_name = String(required=True, max_length=200)
    product_image = String(max_length=500)
    variation = String(max_length=100)
    quantity = Integer(required=True, min_value=1, max_value=100)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=30)

    # Customer
    customer_name = String(required=True, max_length=100)
    customer_phone = String(required=True, max_length=20)
    customer_email = String(max_length=320)

    # Delivery
    delivery_location_id = Identifier()
    delivery_location_name = String(max_length=255)
    delivery_address = String(required=True, max_length=500)
    notes = Text()

    items = HasMany(OrderItem)

    # Pricing, as reported at checkout
    subtotal = Float(default=0.0, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)
    # Whether the free-shipping threshold applied when the order was placed
    free_shipping = Boolean(default=False)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    ordered_via = String(choices=OrderChannel, default=OrderChannel.WEBSITE.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    mpesa = ValueObject(MpesaDetails)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def total_must_match_subtotal_and_fee(self):
        subtotal = self.subtotal or 0.0
        fee = self.delivery_fee or 0.0
        total = self.total or 0.0

        expected = subtotal if self.free_shipping else subtotal + fee

        if abs(total - expected) > 0.01:
            raise ValidationError({"total": [f"Order total {total} does not match subtotal and delivery fee"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_name,
        customer_phone,
        delivery_address,
        items,
        subtotal,
        delivery_fee,
        total,
        ordered_via=OrderChannel.WEBSITE.value,
        payment_method=PaymentMethod.COD.value,
        customer_email=None,
        delivery_location_id=None,
        delivery_location_name=None,
        notes=None,
        mpesa=None,
        free_shipping=None,
    ):
        """Place a new order. Every order starts ``pending``.

        The free-shipping decision is taken here, against the threshold in
        force now, and stored on the order so later threshold changes never
        invalidate orders already placed.
        """
        now = datetime.now(UTC)
        if free_shipping is None:
            free_shipping = (subtotal or 0.0) >= get_settings().free_shipping_threshold

        order = cls(
            order_number=order_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email or None,
            delivery_location_id=delivery_location_id or None,
            delivery_location_name=delivery_location_name or None,
            delivery_address=delivery_address,
            notes=notes or None,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=total,
            free_shipping=free_shipping,
            status=OrderStatus.PENDING.value,
            ordered_via=ordered_via,
            payment_method=payment_method,
            mpesa=MpesaDetails(**mpesa) if mpesa and any(mpesa.values()) else None,
            created_at=now,
            updated_at=now,
        )

        for item in items:
            order.add_items(
                OrderItem(
                    product_id=item["product_id"],
                    product_name=item["product_name"],
                    product_image=item.get("product_image"),
                    variation=item.get("variation"),
                    quantity=item["quantity"],
                    unit_price=item["unit_price"],
                    total_price=item["total_price"],
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_name=order.customer_name,
                customer_phone=order.customer_phone,
                customer_email=order.customer_email,
                ordered_via=order.ordered_via,
                payment_method=order.payment_method,
                item_count=sum(item["quantity"] for item in items),
                subtotal=order.subtotal,
                delivery_fee=order.delivery_fee,
                total=order.total,
                placed_at=now,
            )
        )

        return order

    # -------------------------------------------------------------------
    # Status workflow
    # -------------------------------------------------------------------
    def set_status(self, new_status, changed_by=None):
        """Move the order to ``new_status``. Any status may follow any status."""
        target = new_status if isinstance(new_status, OrderStatus) else parse_status(new_status)
        current = OrderStatus(self.status)

        if target == current:
            return False

        backwards = is_backwards_transition(current, target)
        if backwards:
            logger.warning(
                "Backwards order status transition",
                order_id=str(self.id),
                order_number=self.order_number,
                from_status=current.value,
                to_status=target.value,
            )

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                is_backwards=backwards,
                changed_by=changed_by,
                changed_at=now,
            )
        )
        return True

    @property
    def is_sale(self) -> bool:
        return self.status in SALE_STATUSES

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
