"""Per-client request throttling for the public storefront routes.

Fixed window counters keyed by client address and path, held in process
memory. Order creation and tracking lookups are the two routes guarded;
limits come from ``StoreSettings``.
"""

import time
from dataclasses import dataclass

import structlog
from fastapi import HTTPException, Request

from ordering.settings import get_settings

logger = structlog.get_logger(__name__)

TOO_MANY_REQUESTS = "Too many requests. Please slow down."


@dataclass
class _Window:
    count: int
    resets_at: float


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.split(",")[0].strip():
        return forwarded.split(",")[0].strip()
    if request.headers.get("x-real-ip"):
        return request.headers["x-real-ip"]
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """FastAPI dependency allowing ``limit`` requests per client per window."""

    def __init__(self, limit_setting: str, clock=time.monotonic) -> None:
        self.limit_setting = limit_setting
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    @property
    def limit(self) -> int:
        return getattr(get_settings(), self.limit_setting)

    def hit(self, key: str) -> bool:
        """Count one request for ``key``; False once the window is exhausted."""
        now = self._clock()
        window_seconds = get_settings().rate_limit_window

        # Expired windows are dropped as they are met
        self._windows = {k: w for k, w in self._windows.items() if w.resets_at > now}

        window = self._windows.get(key)
        if window is None:
            self._windows[key] = _Window(count=1, resets_at=now + window_seconds)
            return True

        window.count += 1
        return window.count <= self.limit

    async def __call__(self, request: Request) -> None:
        address = client_address(request)
        if not self.hit(f"{address}:{request.url.path}"):
            logger.warning("Rate limit exceeded", client=address, path=request.url.path, limit=self.limit)
            raise HTTPException(
                status_code=429,
                detail=TOO_MANY_REQUESTS,
                headers={"Retry-After": str(int(get_settings().rate_limit_window))},
            )

    def reset(self) -> None:
        self._windows.clear()


order_creation_limit = RateLimiter("order_rate_limit")
tracking_limit = RateLimiter("tracking_rate_limit")


def reset_rate_limits() -> None:
    order_creation_limit.reset()
    tracking_limit.reset()
