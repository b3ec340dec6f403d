"""Admin analytics dashboard: commerce metrics merged with visitor traffic."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from ordering.analytics import aggregator
from ordering.analytics.snapshots import OrderSnapshot, ProductSnapshot
from ordering.analytics.traffic import TrafficFeed, TrafficSnapshot, get_traffic_feed
from ordering.catalogue import get_catalogue
from ordering.order.order import Order
from ordering.utils.pagination import Page

logger = structlog.get_logger(__name__)

DEFAULT_LOOKBACK_DAYS = 30


@dataclass(frozen=True)
class Dashboard:
    summary: aggregator.OrderSummary
    revenue_by_month: list[dict]
    top_products: Page[aggregator.ProductSales]
    categories: list[aggregator.CategorySales]
    activity: Page[aggregator.ActivityEntry]
    traffic: TrafficSnapshot
    products_live: int

    @property
    def view_change(self) -> int:
        return self.traffic.view_change


def build_dashboard(
    orders: Iterable[OrderSnapshot],
    products: Iterable[ProductSnapshot],
    traffic: TrafficSnapshot,
    now: datetime | None = None,
    product_page: int = 1,
    activity_page: int = 1,
) -> Dashboard:
    orders = tuple(orders)
    products = tuple(products)
    return Dashboard(
        summary=aggregator.summarize(orders),
        revenue_by_month=aggregator.revenue_by_month(orders),
        top_products=aggregator.top_products(orders, page=product_page),
        categories=aggregator.category_mix(orders, products),
        activity=aggregator.activity_feed(orders, now=now, page=activity_page),
        traffic=traffic,
        products_live=len(products),
    )


def fetch_traffic(feed: TrafficFeed, days: int) -> TrafficSnapshot:
    """Visitor metrics are peripheral: an unavailable feed shows as empty."""
    try:
        return feed.fetch(days)
    except Exception as exc:
        logger.warning("Traffic feed unavailable", days=days, error=str(exc))
        return TrafficSnapshot()


def load_dashboard(
    days: int = DEFAULT_LOOKBACK_DAYS,
    product_page: int = 1,
    activity_page: int = 1,
    feed: TrafficFeed | None = None,
) -> Dashboard:
    """Read orders, products and traffic, then derive the dashboard."""
    orders = [OrderSnapshot.from_order(order) for order in current_domain.repository_for(Order).find_all()]
    products = [ProductSnapshot.from_catalogue(product) for product in get_catalogue().list_products()]
    traffic = fetch_traffic(feed or get_traffic_feed(), days)

    return build_dashboard(
        orders,
        products,
        traffic,
        now=datetime.now(UTC),
        product_page=product_page,
        activity_page=activity_page,
    )
