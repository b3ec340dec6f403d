"""Order gateway port and adapters.

Checkout hands finished order requests to an ``OrderGateway``. The domain
adapter processes a ``PlaceOrder`` command in the active Protean domain; the
fake adapter can be configured to succeed, fail or hold a submission open.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.checkout.payload import OrderRequest
from ordering.errors import TransientNetworkError
from ordering.order.creation import PlaceOrder

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderReceipt:
    order_number: str
    order_id: str


class OrderGateway(ABC):
    """Abstract order submission interface."""

    @abstractmethod
    async def submit(self, request: OrderRequest) -> OrderReceipt:
        """Persist an order request.

        Raises:
            ValidationError: the request was rejected as invalid.
            TransientNetworkError: the order service could not be reached.
        """
        ...


class DomainOrderGateway(OrderGateway):
    """Places orders through the ordering domain's command pipeline."""

    async def submit(self, request: OrderRequest) -> OrderReceipt:
        payload = request.to_dict()
        payload.pop("status", None)
        payload["items"] = json.dumps(payload["items"])

        try:
            result = current_domain.process(PlaceOrder(**payload), asynchronous=False)
        except ValidationError:
            raise
        except Exception as exc:
            logger.error("Order submission failed", ordered_via=request.ordered_via, error=str(exc))
            raise TransientNetworkError(cause=exc) from exc

        return OrderReceipt(order_number=result["order_number"], order_id=result["order_id"])


class FakeOrderGateway(OrderGateway):
    """Configurable fake order gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Order service unavailable"
        self.calls: list[OrderRequest] = []
        self._gate: asyncio.Event | None = None

    def configure(self, should_succeed: bool, failure_reason: str = "Order service unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def hold(self) -> None:
        """Keep subsequent submissions in flight until ``release()``."""
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    async def submit(self, request: OrderRequest) -> OrderReceipt:
        self.calls.append(request)

        if self._gate is not None:
            await self._gate.wait()

        if not self.should_succeed:
            raise TransientNetworkError(self.failure_reason)

        return OrderReceipt(
            order_number=f"KF-FAKE{len(self.calls)}",
            order_id=str(uuid4()),
        )

    def reset(self) -> None:
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"
        self.calls.clear()
        self._gate = None


_current_gateway: OrderGateway | None = None


def get_order_gateway() -> OrderGateway:
    """Return the active order gateway. Defaults to DomainOrderGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = DomainOrderGateway()
    return _current_gateway


def set_order_gateway(gateway: OrderGateway) -> None:
    """Override the active order gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_order_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
