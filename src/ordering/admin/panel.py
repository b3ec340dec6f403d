"""Admin order panel: the staff view over orders.

The panel keeps the list of orders and the currently opened order as it was
last read. Writes go through the domain's commands; the displayed status only
changes after the write has been acknowledged, so a failed update leaves what
staff see untouched.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from ordering.order.deletion import DeleteOrders
from ordering.order.order import Order, OrderStatus, parse_status
from ordering.order.status import UpdateOrderStatus
from ordering.utils.pagination import Page, paginate

logger = structlog.get_logger(__name__)

ORDERS_PER_PAGE = 15
ALL_STATUSES = "all"

_STATUS_LABELS = {
    OrderStatus.PENDING.value: "Pending",
    OrderStatus.CONFIRMED.value: "Confirmed",
    OrderStatus.DISPATCHED.value: "Dispatched",
    OrderStatus.DELIVERED.value: "Delivered",
    OrderStatus.CANCELLED.value: "Cancelled",
}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def delete_prompt(count: int) -> str:
    return f"Permanently delete {_plural(count, 'order')}? This cannot be undone."


@dataclass(frozen=True)
class AdminOrderView:
    id: str
    order_number: str
    customer_name: str
    customer_phone: str
    delivery_address: str
    status: str
    ordered_via: str
    payment_method: str
    subtotal: float
    delivery_fee: float
    total: float
    created_at: datetime | None
    items: list[dict] = field(default_factory=list)
    customer_email: str | None = None
    delivery_location: str | None = None
    notes: str | None = None
    mpesa_code: str | None = None
    mpesa_phone: str | None = None
    mpesa_message: str | None = None

    @classmethod
    def from_order(cls, order: Order) -> "AdminOrderView":
        mpesa = order.mpesa
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_email=order.customer_email,
            delivery_address=order.delivery_address,
            delivery_location=order.delivery_location_name,
            notes=order.notes,
            status=order.status,
            ordered_via=order.ordered_via,
            payment_method=order.payment_method,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total=order.total,
            created_at=order.created_at,
            items=[
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "product_image": item.product_image,
                    "variation": item.variation,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "total_price": item.total_price,
                }
                for item in order.items
            ],
            mpesa_code=mpesa.code if mpesa else None,
            mpesa_phone=mpesa.phone if mpesa else None,
            mpesa_message=mpesa.message if mpesa else None,
        )

    def matches(self, search: str) -> bool:
        needle = search.strip().lower()
        return needle in self.customer_name.lower() or needle in self.order_number.lower()


@dataclass(frozen=True)
class StatusUpdateOutcome:
    order_id: str
    success: bool
    status: str | None
    message: str


@dataclass(frozen=True)
class BulkDeleteReport:
    requested: int
    deleted: int
    confirmed: bool = True

    @property
    def failed(self) -> int:
        return self.requested - self.deleted if self.confirmed else 0

    @property
    def message(self) -> str:
        if not self.confirmed:
            return "Deletion cancelled"
        if self.deleted == 0 and self.requested:
            return "Failed to delete orders"
        return f"{_plural(self.deleted, 'order')} deleted"


class AdminOrderPanel:
    def __init__(self, per_page: int = ORDERS_PER_PAGE) -> None:
        self.per_page = per_page
        self.orders: list[AdminOrderView] = []
        self.selected: AdminOrderView | None = None

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def refresh(self) -> list[AdminOrderView]:
        """Reload all orders, newest first."""
        repo = current_domain.repository_for(Order)
        self.orders = [AdminOrderView.from_order(order) for order in repo.find_newest_first()]
        if self.selected is not None:
            self.selected = next((view for view in self.orders if view.id == self.selected.id), None)
        return self.orders

    def list_orders(self, search: str = "", status: str = ALL_STATUSES, page: int = 1) -> Page[AdminOrderView]:
        self.refresh()
        views = self.orders
        if status and status != ALL_STATUSES:
            wanted = parse_status(status).value
            views = [view for view in views if view.status == wanted]
        if search and search.strip():
            views = [view for view in views if view.matches(search)]
        return paginate(views, page=page, per_page=self.per_page)

    def stats(self) -> dict[str, int]:
        """Order counts per status across the loaded orders."""
        counts = {status.value: 0 for status in OrderStatus}
        for view in self.orders:
            counts[view.status] = counts.get(view.status, 0) + 1
        counts["total"] = len(self.orders)
        return counts

    def select(self, order_id: str) -> AdminOrderView | None:
        self.selected = next((view for view in self.orders if view.id == str(order_id)), None)
        return self.selected

    def pending_count(self) -> int:
        return current_domain.repository_for(Order).count_by_status(OrderStatus.PENDING.value)

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def set_status(self, order_id: str, status: str, changed_by: str | None = None) -> StatusUpdateOutcome:
        """Write a new status; echo it into the displayed order once acknowledged."""
        previous = next((view.status for view in self.orders if view.id == str(order_id)), None)
        try:
            new_status = current_domain.process(
                UpdateOrderStatus(order_id=str(order_id), status=status, changed_by=changed_by),
                asynchronous=False,
            )
        except Exception as exc:
            logger.error("Order status update failed", order_id=str(order_id), status=status, error=str(exc))
            return StatusUpdateOutcome(
                order_id=str(order_id),
                success=False,
                status=previous,
                message="Failed to update order status",
            )

        self.orders = [replace(view, status=new_status) if view.id == str(order_id) else view for view in self.orders]
        if self.selected is not None and self.selected.id == str(order_id):
            self.selected = replace(self.selected, status=new_status)

        return StatusUpdateOutcome(
            order_id=str(order_id),
            success=True,
            status=new_status,
            message=f"Order {_STATUS_LABELS[new_status].lower()}",
        )

    def delete_orders(self, order_ids: list[str], confirm: Callable[[str], bool]) -> BulkDeleteReport:
        """Permanently delete orders after an explicit confirmation."""
        order_ids = list(dict.fromkeys(str(order_id) for order_id in order_ids))
        if not order_ids:
            return BulkDeleteReport(requested=0, deleted=0)

        if not confirm(delete_prompt(len(order_ids))):
            return BulkDeleteReport(requested=len(order_ids), deleted=0, confirmed=False)

        try:
            deleted = current_domain.process(DeleteOrders(order_ids=json.dumps(order_ids)), asynchronous=False)
        except Exception as exc:
            logger.error("Bulk order delete failed", requested=len(order_ids), error=str(exc))
            return BulkDeleteReport(requested=len(order_ids), deleted=0)

        self.orders = [view for view in self.orders if view.id not in order_ids]
        if self.selected is not None and self.selected.id in order_ids:
            self.selected = None

        return BulkDeleteReport(requested=len(order_ids), deleted=deleted)
