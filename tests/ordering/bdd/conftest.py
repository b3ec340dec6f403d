"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.order.events import OrderStatusChanged
from ordering.order.order import Order
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """Result or error of the When step, for shared Then steps."""
    return {"result": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps: Order
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order")
def pending_order():
    order = Order.place(
        order_number="KF-BDD1",
        customer_name="Jane Wanjiku",
        customer_phone="0712345678",
        delivery_address="Moi Avenue, Nairobi",
        items=[
            {
                "product_id": "prod-dress",
                "product_name": "Linen Dress",
                "quantity": 2,
                "unit_price": 1000.0,
                "total_price": 2000.0,
            }
        ],
        subtotal=2000.0,
        delivery_fee=200.0,
        total=2200.0,
    )
    order._events.clear()
    return order


@given(parsers.cfparse('the order was moved to "{status}"'), target_fixture="order")
def order_moved_to(order, status):
    order.set_status(status)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps: shared
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the action fails with a validation error")
def action_fails(outcome):
    assert outcome["error"] is not None, "Expected a validation error but none was raised"
    assert isinstance(outcome["error"], ValidationError)


@then("no status change is recorded")
def no_status_change(order):
    assert not any(isinstance(e, OrderStatusChanged) for e in order._events)


@then("the status change is flagged as backwards")
def flagged_backwards(order):
    changes = [e for e in order._events if isinstance(e, OrderStatusChanged)]
    assert changes and changes[-1].is_backwards is True


@then("the status change is not flagged as backwards")
def not_flagged_backwards(order):
    changes = [e for e in order._events if isinstance(e, OrderStatusChanged)]
    assert changes and changes[-1].is_backwards is False
