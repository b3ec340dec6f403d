"""Commerce metrics derived from orders and products on every read.

Nothing here is stored. Only sale orders (confirmed, dispatched or delivered)
count towards revenue, product and category figures; pending orders still
count towards the raw order total.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ordering.analytics.snapshots import OrderSnapshot, ProductSnapshot
from ordering.order.order import OrderStatus
from ordering.utils.formatting import as_utc, format_price, round_half_up, time_ago
from ordering.utils.pagination import Page, paginate

MONTHS_SHOWN = 6
TOP_CATEGORIES = 6
PRODUCTS_PER_PAGE = 5
ACTIVITY_PER_PAGE = 5
OTHER_CATEGORY = "Other"

_ACTIVITY_ACTIONS = {
    OrderStatus.PENDING.value: "New order",
    OrderStatus.DISPATCHED.value: "Order dispatched",
    OrderStatus.DELIVERED.value: "Order delivered",
}


@dataclass(frozen=True)
class OrderSummary:
    total_orders: int
    pending_orders: int
    total_sales: int
    total_revenue: float


@dataclass(frozen=True)
class ProductSales:
    name: str
    sold: int
    revenue: float


@dataclass(frozen=True)
class CategorySales:
    name: str
    sold: int
    revenue: float
    percentage: int


@dataclass(frozen=True)
class ActivityEntry:
    action: str
    detail: str
    time: str
    order_id: str


def sale_orders(orders: Iterable[OrderSnapshot]) -> list[OrderSnapshot]:
    return [order for order in orders if order.is_sale]


def summarize(orders: Iterable[OrderSnapshot]) -> OrderSummary:
    orders = list(orders)
    sales = sale_orders(orders)
    return OrderSummary(
        total_orders=len(orders),
        pending_orders=sum(1 for order in orders if order.status == OrderStatus.PENDING.value),
        total_sales=len(sales),
        total_revenue=sum(order.total for order in sales),
    )


def revenue_by_month(orders: Iterable[OrderSnapshot]) -> list[dict]:
    """Sale revenue per ``"Mon YY"`` bucket, the latest six in date order."""
    buckets: dict[tuple[int, int], float] = {}
    for order in sale_orders(orders):
        moment = as_utc(order.created_at)
        key = (moment.year, moment.month)
        buckets[key] = buckets.get(key, 0.0) + order.total

    if not buckets:
        return [{"month": "Now", "value": 0}]

    recent = sorted(buckets)[-MONTHS_SHOWN:]
    return [{"month": datetime(year, month, 1).strftime("%b %y"), "value": buckets[(year, month)]} for year, month in recent]


def product_sales(orders: Iterable[OrderSnapshot]) -> list[ProductSales]:
    """Units and revenue per product name across sale orders, by revenue."""
    totals: dict[str, list] = {}
    for order in sale_orders(orders):
        for item in order.items:
            entry = totals.setdefault(item.name, [0, 0.0])
            entry[0] += item.qty
            entry[1] += item.revenue

    ranked = [ProductSales(name=name, sold=sold, revenue=revenue) for name, (sold, revenue) in totals.items()]
    return sorted(ranked, key=lambda p: p.revenue, reverse=True)


def top_products(orders: Iterable[OrderSnapshot], page: int = 1, per_page: int = PRODUCTS_PER_PAGE) -> Page[ProductSales]:
    return paginate(product_sales(orders), page=page, per_page=per_page)


def category_mix(orders: Iterable[OrderSnapshot], products: Iterable[ProductSnapshot]) -> list[CategorySales]:
    """Units, revenue and share per category, resolved by product name.

    Items whose name no longer matches a catalogue product fall into "Other".
    """
    category_by_name = {product.name.lower(): product.category for product in products}

    totals: dict[str, list] = {}
    for order in sale_orders(orders):
        for item in order.items:
            category = category_by_name.get(item.name.lower()) or OTHER_CATEGORY
            entry = totals.setdefault(category, [0, 0.0])
            entry[0] += item.qty
            entry[1] += item.revenue

    total_sold = sum(sold for sold, _ in totals.values()) or 1
    mix = [
        CategorySales(name=name, sold=sold, revenue=revenue, percentage=round_half_up(sold / total_sold * 100))
        for name, (sold, revenue) in totals.items()
    ]
    return sorted(mix, key=lambda c: c.revenue, reverse=True)[:TOP_CATEGORIES]


def activity_action(status: str) -> str:
    return _ACTIVITY_ACTIONS.get(status, f"Order {status}")


def activity_entries(orders: Iterable[OrderSnapshot], now: datetime | None = None) -> list[ActivityEntry]:
    newest_first = sorted(orders, key=lambda order: as_utc(order.created_at), reverse=True)
    return [
        ActivityEntry(
            action=activity_action(order.status),
            detail=f"{order.order_number} by {order.customer} - {format_price(order.total)}",
            time=time_ago(order.created_at, now),
            order_id=order.id,
        )
        for order in newest_first
    ]


def activity_feed(
    orders: Iterable[OrderSnapshot],
    now: datetime | None = None,
    page: int = 1,
    per_page: int = ACTIVITY_PER_PAGE,
) -> Page[ActivityEntry]:
    return paginate(activity_entries(orders, now), page=page, per_page=per_page)
