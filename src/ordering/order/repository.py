"""Custom repository for the Order aggregate."""

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.utils.formatting import as_utc

PAGE_SIZE = 100


@ordering.repository(part_of=Order)
class OrderRepository:
    """Order queries used by the admin panel, tracking and analytics."""

    def find_all(self) -> list[Order]:
        """Every stored order, read page by page."""
        orders = []
        offset = 0
        while True:
            batch = self._dao.query.offset(offset).limit(PAGE_SIZE).all().items
            orders.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        return orders

    def find_newest_first(self) -> list[Order]:
        return sorted(self.find_all(), key=lambda order: as_utc(order.created_at), reverse=True)

    def find_by_order_number(self, order_number: str) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def count_by_status(self, status: str) -> int:
        return self._dao.query.filter(status=status).all().total

    def remove(self, order: Order) -> None:
        self._dao.delete(order)
