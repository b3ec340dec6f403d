"""Pending-orders badge: periodically polls the number of pending orders."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from protean.utils.globals import current_domain

from ordering.order.order import Order, OrderStatus
from ordering.settings import get_settings

logger = structlog.get_logger(__name__)

CountSource = Callable[[], int | Awaitable[int]]


def domain_pending_count() -> int:
    return current_domain.repository_for(Order).count_by_status(OrderStatus.PENDING.value)


class PendingOrdersBadge:
    """Keeps ``count`` fresh by polling on the running event loop.

    A failed poll keeps the last known count.
    """

    def __init__(self, count_source: CountSource = domain_pending_count, interval: float | None = None) -> None:
        self.count_source = count_source
        self.interval = interval if interval is not None else get_settings().pending_poll_interval
        self.count = 0
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> int:
        try:
            result = self.count_source()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.warning("Pending order count poll failed", error=str(exc))
            return self.count

        self.count = int(result)
        return self.count

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None


def pending_count_in(domain) -> Callable[[], int]:
    """Count source that opens its own domain context (background tasks have none)."""

    def count() -> int:
        with domain.domain_context():
            return domain_pending_count()

    return count


def pending_badge_lifespan(domain, interval: float | None = None):
    """FastAPI lifespan that runs a badge for the app's lifetime as ``app.state.pending_badge``."""

    @asynccontextmanager
    async def lifespan(app):
        badge = PendingOrdersBadge(count_source=pending_count_in(domain), interval=interval)
        app.state.pending_badge = badge
        badge.start()
        logger.info("Pending order badge started", interval=badge.interval)
        try:
            yield
        finally:
            await badge.stop()
            logger.info("Pending order badge stopped")

    return lifespan
