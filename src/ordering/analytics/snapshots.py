"""Immutable inputs for analytics: orders and catalogue products as read."""

from dataclasses import dataclass, field
from datetime import datetime

from ordering.catalogue.port import CatalogueProduct
from ordering.order.order import SALE_STATUSES, Order


@dataclass(frozen=True)
class SnapshotItem:
    name: str
    qty: int
    price: float

    @property
    def revenue(self) -> float:
        return self.price * self.qty


@dataclass(frozen=True)
class OrderSnapshot:
    id: str
    order_number: str
    customer: str
    total: float
    status: str
    created_at: datetime
    items: tuple[SnapshotItem, ...] = field(default_factory=tuple)

    @property
    def is_sale(self) -> bool:
        return self.status in SALE_STATUSES

    @classmethod
    def from_order(cls, order: Order) -> "OrderSnapshot":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer=order.customer_name,
            total=order.total or 0.0,
            status=order.status,
            created_at=order.created_at,
            items=tuple(
                SnapshotItem(name=item.product_name, qty=item.quantity, price=item.unit_price) for item in order.items
            ),
        )


@dataclass(frozen=True)
class ProductSnapshot:
    id: str
    name: str
    price: float
    category: str

    @classmethod
    def from_catalogue(cls, product: CatalogueProduct) -> "ProductSnapshot":
        return cls(id=str(product.id), name=product.name, price=product.price, category=product.category)
