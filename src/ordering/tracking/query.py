"""Customer order tracking: look up orders by order number or phone.

Read-only. Inputs are sanitized before they reach the repository: order
numbers keep only letters, digits and dashes; phone searches keep digits and
``+`` and drop the country or trunk prefix so ``0712…``, ``254712…`` and
``+254712…`` all find the same orders.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

MAX_ORDER_NUMBER_LENGTH = 30
MAX_PHONE_LENGTH = 15
MIN_PHONE_DIGITS = 6
MAX_RESULTS = 10

_ORDER_NUMBER_UNSAFE_RE = re.compile(r"[^A-Za-z0-9-]")
_PHONE_UNSAFE_RE = re.compile(r"[^0-9+]")
_PHONE_PREFIX_RE = re.compile(r"^(\+?254|0)")

TIMELINE_STEPS = ("Order Placed", "Processing", "Delivered")

_TIMELINE_POSITION = {
    OrderStatus.PENDING.value: 0,
    OrderStatus.CONFIRMED.value: 1,
    OrderStatus.DISPATCHED.value: 1,
    OrderStatus.DELIVERED.value: 2,
}


class TrackingState(Enum):
    NOT_SEARCHED = "not_searched"
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class TimelineStep:
    label: str
    reached: bool
    current: bool


@dataclass(frozen=True)
class TrackedOrder:
    id: str
    order_number: str
    customer: str
    phone: str
    items: list[dict]
    subtotal: float
    delivery_fee: float
    total: float
    location: str
    address: str
    status: str
    created_at: datetime | None

    @classmethod
    def from_order(cls, order: Order) -> "TrackedOrder":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer=order.customer_name,
            phone=order.customer_phone,
            items=[
                {
                    "name": item.product_name,
                    "qty": item.quantity,
                    "price": item.unit_price,
                    "variation": item.variation,
                    "image": item.product_image,
                }
                for item in order.items
            ],
            subtotal=order.subtotal or 0.0,
            delivery_fee=order.delivery_fee or 0.0,
            total=order.total or 0.0,
            location=order.delivery_location_name or order.delivery_address or "",
            address=order.delivery_address or "",
            status=order.status,
            created_at=order.created_at,
        )

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value

    @property
    def timeline_position(self) -> int | None:
        """Index into ``TIMELINE_STEPS``; None for cancelled orders."""
        return _TIMELINE_POSITION.get(self.status)

    @property
    def timeline(self) -> list[TimelineStep]:
        position = self.timeline_position
        if position is None:
            return [TimelineStep(label=label, reached=False, current=False) for label in TIMELINE_STEPS]
        return [
            TimelineStep(label=label, reached=index <= position, current=index == position)
            for index, label in enumerate(TIMELINE_STEPS)
        ]


@dataclass(frozen=True)
class TrackingResult:
    state: TrackingState
    orders: list[TrackedOrder] = field(default_factory=list)


NOT_SEARCHED = TrackingResult(state=TrackingState.NOT_SEARCHED)


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def clean_order_number(raw: str | None) -> str:
    return _ORDER_NUMBER_UNSAFE_RE.sub("", (raw or "").strip())[:MAX_ORDER_NUMBER_LENGTH]


def clean_phone_fragment(raw: str | None) -> str:
    """Digits the stored phone must contain, without the 254 / 0 prefix."""
    phone = _PHONE_UNSAFE_RE.sub("", (raw or "").strip())[:MAX_PHONE_LENGTH]
    return _PHONE_PREFIX_RE.sub("", phone, count=1)


def track_orders(order_number: str | None = None, phone: str | None = None) -> TrackingResult:
    """Find orders by exactly one of order number or phone.

    Raises ``ValidationError`` when neither or both are given, or when the
    phone leaves fewer than six digits to search on.
    """
    order_number = clean_order_number(order_number)
    has_phone = bool((phone or "").strip())

    if not order_number and not has_phone:
        raise ValidationError({"search": ["Provide order number or phone number"]})
    if order_number and has_phone:
        raise ValidationError({"search": ["Search by order number or phone number, not both"]})

    repo = current_domain.repository_for(Order)

    if order_number:
        order = repo.find_by_order_number(order_number)
        matches = [order] if order is not None else []
    else:
        fragment = clean_phone_fragment(phone)
        if len(fragment) < MIN_PHONE_DIGITS:
            raise ValidationError({"phone": ["Phone number too short"]})
        matches = [order for order in repo.find_newest_first() if fragment in _digits(order.customer_phone)]

    matches = matches[:MAX_RESULTS]
    logger.info(
        "Order tracking lookup",
        mode="order_number" if order_number else "phone",
        results=len(matches),
    )

    if not matches:
        return TrackingResult(state=TrackingState.NOT_FOUND)
    return TrackingResult(state=TrackingState.FOUND, orders=[TrackedOrder.from_order(order) for order in matches])
