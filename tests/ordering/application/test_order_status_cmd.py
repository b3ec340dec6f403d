"""Application tests for staff status updates and bulk deletion."""

import json

import pytest
from ordering.order.deletion import DeleteOrders
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _seed_order(order_number="KF-TEST1", status="pending"):
    order = Order.place(
        order_number=order_number,
        customer_name="Jane Wanjiku",
        customer_phone="0712345678",
        delivery_address="Moi Avenue, Nairobi",
        items=[
            {
                "product_id": "prod-bag",
                "product_name": "Leather Bag",
                "quantity": 1,
                "unit_price": 2500.0,
                "total_price": 2500.0,
            }
        ],
        subtotal=2500.0,
        delivery_fee=200.0,
        total=2700.0,
    )
    if status != "pending":
        order.set_status(status)
    current_domain.repository_for(Order).add(order)
    return str(order.id)


class TestUpdateOrderStatus:
    def test_updates_status(self):
        order_id = _seed_order()

        result = current_domain.process(
            UpdateOrderStatus(order_id=order_id, status="confirmed", changed_by="staff"),
            asynchronous=False,
        )

        assert result == "confirmed"
        assert current_domain.repository_for(Order).get(order_id).status == "confirmed"

    def test_backwards_move_is_allowed(self):
        order_id = _seed_order(status="delivered")

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="pending"), asynchronous=False)

        assert current_domain.repository_for(Order).get(order_id).status == "pending"

    def test_unknown_status_rejected(self):
        order_id = _seed_order()

        with pytest.raises(ValidationError):
            current_domain.process(UpdateOrderStatus(order_id=order_id, status="teleported"), asynchronous=False)

        assert current_domain.repository_for(Order).get(order_id).status == "pending"

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateOrderStatus(order_id="missing-order", status="confirmed"), asynchronous=False)

    def test_last_write_wins(self):
        order_id = _seed_order()

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="dispatched"), asynchronous=False)
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="cancelled"), asynchronous=False)

        assert current_domain.repository_for(Order).get(order_id).status == "cancelled"


class TestDeleteOrders:
    def test_deletes_orders(self):
        first = _seed_order("KF-1")
        second = _seed_order("KF-2")
        kept = _seed_order("KF-3")

        deleted = current_domain.process(DeleteOrders(order_ids=json.dumps([first, second])), asynchronous=False)

        assert deleted == 2
        remaining = current_domain.repository_for(Order).find_all()
        assert [str(order.id) for order in remaining] == [kept]

    def test_unknown_ids_are_skipped(self):
        order_id = _seed_order()

        deleted = current_domain.process(
            DeleteOrders(order_ids=json.dumps([order_id, "missing-order", order_id])),
            asynchronous=False,
        )

        assert deleted == 1
        assert current_domain.repository_for(Order).find_all() == []
