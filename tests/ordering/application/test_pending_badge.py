"""Application tests for the pending-orders badge poller."""

import asyncio
import time

from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.admin.badge import PendingOrdersBadge, domain_pending_count, pending_badge_lifespan
from ordering.domain import ordering
from ordering.order.order import Order
from protean import current_domain


def _seed_pending(order_number):
    order = Order.place(
        order_number=order_number,
        customer_name="Jane Wanjiku",
        customer_phone="0712345678",
        delivery_address="Moi Avenue, Nairobi",
        items=[
            {
                "product_id": "prod-scarf",
                "product_name": "Silk Scarf",
                "quantity": 1,
                "unit_price": 450.0,
                "total_price": 450.0,
            }
        ],
        subtotal=450.0,
        delivery_fee=0.0,
        total=450.0,
    )
    current_domain.repository_for(Order).add(order)


class TestPollOnce:
    def test_counts_pending_orders(self):
        _seed_pending("KF-1")
        _seed_pending("KF-2")

        badge = PendingOrdersBadge(interval=1)

        assert asyncio.run(badge.poll_once()) == 2
        assert domain_pending_count() == 2

    def test_failed_poll_keeps_last_count(self):
        calls = []

        def flaky_source():
            calls.append(1)
            if len(calls) > 1:
                raise ConnectionError("network down")
            return 3

        badge = PendingOrdersBadge(count_source=flaky_source, interval=1)
        asyncio.run(badge.poll_once())
        asyncio.run(badge.poll_once())

        assert badge.count == 3

    def test_awaitable_source(self):
        async def source():
            return 7

        badge = PendingOrdersBadge(count_source=source, interval=1)

        assert asyncio.run(badge.poll_once()) == 7


class TestPolling:
    def test_polls_until_stopped(self):
        counts = iter(range(100))
        badge = PendingOrdersBadge(count_source=lambda: next(counts), interval=0.01)

        async def scenario():
            badge.start()
            assert badge.is_running
            await asyncio.sleep(0.05)
            await badge.stop()

        asyncio.run(scenario())

        assert badge.count >= 1
        assert not badge.is_running

    def test_start_is_idempotent(self):
        badge = PendingOrdersBadge(count_source=lambda: 0, interval=0.01)

        async def scenario():
            badge.start()
            task = badge._task
            badge.start()
            same = badge._task is task
            await badge.stop()
            return same

        assert asyncio.run(scenario()) is True


class TestAppLifespan:
    def test_badge_runs_for_app_lifetime(self):
        _seed_pending("KF-1")
        app = FastAPI(lifespan=pending_badge_lifespan(ordering, interval=0.01))

        with TestClient(app):
            badge = app.state.pending_badge
            deadline = time.monotonic() + 2
            while badge.count != 1 and time.monotonic() < deadline:
                time.sleep(0.01)

            assert badge.is_running
            assert badge.count == 1

        assert not badge.is_running
